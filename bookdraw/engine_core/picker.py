"""
Picker - Series-aware rules for choosing the next book.

Every function here is pure: it takes the catalog and an AppState
snapshot and returns a new snapshot or a read-only result. The only
nondeterminism is the uniform draw in pick_next_book, and its random
source can be injected.

Rules, in short:
- A pending decision blocks everything else
- An active series forces its next book (series lock)
- Otherwise draw uniformly from standalones and Book 1 of unstarted series
- Paused and dropped series never show up in the draw
"""

from __future__ import annotations
import logging
import random
from typing import Iterable

from .state import (
    AppMode,
    AppModeInfo,
    AppState,
    Book,
    Eligibility,
    PickResult,
    SeriesDecision,
    SeriesProgress,
    SeriesState,
    SeriesStatus,
    utc_now,
)

logger = logging.getLogger(__name__)

NO_ELIGIBLE_REASON = "No eligible books remaining!"

_DECISION_STATUS = {
    SeriesDecision.CONTINUE: SeriesStatus.ACTIVE,
    SeriesDecision.PAUSE: SeriesStatus.PAUSED,
    SeriesDecision.DROP: SeriesStatus.DROPPED,
}


# =============================================================================
# Initialization
# =============================================================================

def list_series_names(catalog: Iterable[Book]) -> list[str]:
    """Distinct series names in catalog order."""
    names: list[str] = []
    for book in catalog:
        if book.series and book.series.name not in names:
            names.append(book.series.name)
    return names


def initialize_series_state(catalog: Iterable[Book]) -> dict[str, SeriesState]:
    """Every series in the catalog starts unstarted at Book 1."""
    return {name: SeriesState.unstarted() for name in list_series_names(catalog)}


def merge_series_state(
    catalog: Iterable[Book],
    persisted: dict[str, SeriesState],
) -> dict[str, SeriesState]:
    """
    Backfill series that were added to the catalog after the state was saved.

    Persisted entries always win over catalog defaults.
    """
    merged = initialize_series_state(catalog)
    merged.update(persisted)
    return merged


def create_initial_state(catalog: Iterable[Book]) -> AppState:
    """The canonical empty snapshot."""
    return AppState(
        completed_book_ids=[],
        series_state=initialize_series_state(catalog),
        current_pick_id=None,
        pending_decision=None,
        active_series=None,
        updated_at=utc_now(),
    )


# =============================================================================
# Derivations
# =============================================================================

def get_app_mode(state: AppState) -> AppModeInfo:
    """
    Derive the current mode.

    Priority: decision_required > series_lock > random_draw.
    """
    if state.pending_decision:
        return AppModeInfo(
            mode=AppMode.DECISION_REQUIRED,
            series_name=state.pending_decision,
        )

    active = _active_series(state)
    if active:
        name, info = active
        return AppModeInfo(
            mode=AppMode.SERIES_LOCK,
            series_name=name,
            next_order=info.next_order,
        )

    return AppModeInfo(mode=AppMode.RANDOM_DRAW)


def eligible_pool(catalog: Iterable[Book], state: AppState) -> list[Book]:
    """Books a random draw may return, in catalog order."""
    completed = state.completed_set
    pool: list[Book] = []

    for book in catalog:
        if book.id in completed:
            continue

        if book.series is None:
            pool.append(book)
            continue

        info = state.get_series_state(book.series.name)
        if info and info.status in (SeriesStatus.PAUSED, SeriesStatus.DROPPED):
            continue

        # Book 2+ only comes up through the active series
        if book.series.order == 1 and (info is None or info.status == SeriesStatus.UNSTARTED):
            pool.append(book)

    return pool


def pick_next_book(
    catalog: list[Book],
    state: AppState,
    rng: random.Random | None = None,
) -> PickResult:
    """
    Choose the next book.

    An active series forces its next_order book. Otherwise a book is
    drawn uniformly from the eligible pool.
    """
    completed = state.completed_set

    active = _active_series(state)
    if active:
        name, info = active
        for book in catalog:
            if (
                book.series is not None
                and book.series.name == name
                and book.series.order == info.next_order
                and book.id not in completed
            ):
                return PickResult(
                    book=book,
                    forced=True,
                    reason=f'Continuing "{name}" series (Book {info.next_order})',
                    eligible_count=1,
                )
        logger.warning(
            "Active series %r has no unread Book %d in the catalog; falling back to a draw",
            name,
            info.next_order,
        )

    pool = eligible_pool(catalog, state)
    if not pool:
        return PickResult(
            book=None,
            forced=False,
            reason=NO_ELIGIBLE_REASON,
            eligible_count=0,
        )

    pick = (rng or random).choice(pool)
    if pick.series:
        reason = f'Randomly selected Book 1 of "{pick.series.name}" from {len(pool)} options'
    else:
        reason = f"Randomly selected from {len(pool)} eligible books"

    return PickResult(book=pick, forced=False, reason=reason, eligible_count=len(pool))


def get_book_eligibility(book: Book, state: AppState) -> Eligibility:
    """Explain whether a book can come up next. Mirrors pick_next_book."""
    if state.is_completed(book.id):
        return Eligibility(False, "Already completed")

    if book.series is None:
        return Eligibility(True, "Standalone - eligible")

    name = book.series.name
    info = state.get_series_state(name)
    status = info.status if info else SeriesStatus.UNSTARTED

    if status == SeriesStatus.DROPPED:
        return Eligibility(False, f'Series "{name}" was dropped')

    if status == SeriesStatus.PAUSED:
        return Eligibility(False, f'Series "{name}" is paused')

    if status == SeriesStatus.ACTIVE:
        if book.series.order == info.next_order:
            return Eligibility(True, f'Next in active series "{name}"')
        return Eligibility(False, f"Not next in series (need Book {info.next_order})")

    if book.series.order == 1:
        return Eligibility(True, "Book 1 - eligible for random selection")

    return Eligibility(
        False,
        f"Book {book.series.order} - must complete earlier books first",
    )


def get_series_progress(
    catalog: Iterable[Book],
    state: AppState,
    series_name: str,
) -> SeriesProgress:
    """How far the club is through a series."""
    series_books = [b for b in catalog if b.series and b.series.name == series_name]
    completed = state.completed_set
    return SeriesProgress(
        series_name=series_name,
        completed=sum(1 for b in series_books if b.id in completed),
        total=len(series_books),
        status=state.series_status(series_name),
    )


# =============================================================================
# Transitions
# =============================================================================

def complete_book(catalog: Iterable[Book], state: AppState, book_id: str) -> AppState:
    """
    Mark a book as read.

    Unknown ids leave the state untouched. Finishing a pilot of an
    unstarted series asks for a decision; finishing the expected book of
    the active series advances it, and the last book resets the series.
    """
    book = find_book(catalog, book_id)
    if book is None:
        logger.debug("complete_book: unknown book %r", book_id)
        return state

    new_state = state._copy_with(
        completed_book_ids=[*state.completed_book_ids, book_id],
        current_pick_id=None,
        updated_at=utc_now(),
    )

    if book.series is None:
        return new_state

    name = book.series.name
    info = state.get_series_state(name)

    if book.series.order == 1 and (info is None or info.status == SeriesStatus.UNSTARTED):
        logger.debug("Pilot of %r finished; decision pending", name)
        new_state = new_state._copy_with(pending_decision=name)

    if info and info.status == SeriesStatus.ACTIVE and info.next_order == book.series.order:
        next_order = info.next_order + 1
        if next_order > book.series.total:
            # Fully read: back to the start so the series can be read again
            logger.debug("Series %r finished; resetting", name)
            new_state = new_state.with_series_state(name, SeriesState.unstarted())
        else:
            new_state = new_state.with_series_state(
                name, SeriesState(status=SeriesStatus.ACTIVE, next_order=next_order)
            )

    return new_state


def decide_series(
    state: AppState,
    series_name: str,
    decision: SeriesDecision | str,
) -> AppState:
    """
    Resolve the decision raised by finishing a pilot.

    The pilot is always Book 1, so every outcome continues from Book 2.
    """
    decision = SeriesDecision(decision)
    new_state = state._copy_with(pending_decision=None, updated_at=utc_now())
    logger.debug("Series %r decided: %s", series_name, decision.value)
    return new_state.with_series_state(
        series_name,
        SeriesState(status=_DECISION_STATUS[decision], next_order=2),
    )


def pause_series(state: AppState, series_name: str) -> AppState:
    """Pause the series if it is active; otherwise a no-op."""
    info = state.get_series_state(series_name)
    if info is None or info.status != SeriesStatus.ACTIVE:
        return state
    return state.with_series_state(
        series_name, info.with_status(SeriesStatus.PAUSED)
    ).touch()


def resume_series(state: AppState, series_name: str) -> AppState:
    """Resume the series if it is paused; otherwise a no-op."""
    info = state.get_series_state(series_name)
    if info is None or info.status != SeriesStatus.PAUSED:
        return state
    return state.with_series_state(
        series_name, info.with_status(SeriesStatus.ACTIVE)
    ).touch()


def set_current_pick(state: AppState, book_id: str | None) -> AppState:
    """Record the book being read (None clears it)."""
    return state._copy_with(current_pick_id=book_id, updated_at=utc_now())


# =============================================================================
# Helpers
# =============================================================================

def find_book(catalog: Iterable[Book], book_id: str) -> Book | None:
    for book in catalog:
        if book.id == book_id:
            return book
    return None


def _active_series(state: AppState) -> tuple[str, SeriesState] | None:
    """The locked series and its entry, if it is really active."""
    if not state.active_series:
        return None
    info = state.get_series_state(state.active_series)
    if info is None or info.status != SeriesStatus.ACTIVE:
        return None
    return state.active_series, info
