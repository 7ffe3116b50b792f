"""
Picker State - Books, series bookkeeping and the shared app snapshot.

Design principles:
- Immutable-friendly: every transition returns a new AppState
- Serializable: the store adapter maps AppState to a flat record
- Single lock: at most one series is active, tracked by active_series
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from copy import deepcopy
from enum import Enum


GLOBAL_STATE_ID = "global"


class SeriesStatus(str, Enum):
    """Lifecycle status of a series."""
    UNSTARTED = "unstarted"
    ACTIVE = "active"
    PAUSED = "paused"
    DROPPED = "dropped"


class SeriesDecision(str, Enum):
    """The one-time choice made after a pilot is finished."""
    CONTINUE = "continue"
    PAUSE = "pause"
    DROP = "drop"


class AppMode(str, Enum):
    """What the club can do next."""
    DECISION_REQUIRED = "decision_required"
    SERIES_LOCK = "series_lock"
    RANDOM_DRAW = "random_draw"


def utc_now() -> str:
    """ISO-8601 timestamp used for updated_at."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Series:
    """
    A book's place in a series.

    The series name is the join key across books; there is no
    separate series entity.
    """
    name: str
    order: int  # 1-based position
    total: int


@dataclass
class Book:
    """
    A catalog entry.

    Catalog books never change at runtime. Two books are the same
    book when their ids match.
    """
    id: str
    title: str
    author: str
    genres: list[str] = field(default_factory=list)
    series: Series | None = None

    # Display-only
    description: str | None = None
    cover_url: str | None = None

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Book):
            return False
        return self.id == other.id

    @property
    def is_standalone(self) -> bool:
        return self.series is None

    @property
    def is_pilot(self) -> bool:
        """First book of a series."""
        return self.series is not None and self.series.order == 1


@dataclass(frozen=True)
class SeriesState:
    """Per-series progress: status plus the order of the next book to read."""
    status: SeriesStatus = SeriesStatus.UNSTARTED
    next_order: int = 1

    @classmethod
    def unstarted(cls) -> SeriesState:
        return cls(status=SeriesStatus.UNSTARTED, next_order=1)

    def with_status(self, status: SeriesStatus) -> SeriesState:
        """Return a copy with a different status, keeping next_order."""
        return SeriesState(status=status, next_order=self.next_order)


@dataclass
class AppState:
    """
    The single shared snapshot the picker operates on.

    All transitions go through the picker functions (or the reducer),
    which return new AppState instances. version belongs to the store
    and is never changed by the engine.
    """
    state_id: str = GLOBAL_STATE_ID
    completed_book_ids: list[str] = field(default_factory=list)
    series_state: dict[str, SeriesState] = field(default_factory=dict)
    current_pick_id: str | None = None
    pending_decision: str | None = None  # Series name awaiting a decision
    active_series: str | None = None  # The series holding the lock
    updated_at: str = field(default_factory=utc_now)
    version: int = 0

    def __post_init__(self):
        # Hand-built states and legacy records only carry series_state
        if self.active_series is None:
            for name, info in self.series_state.items():
                if info.status == SeriesStatus.ACTIVE:
                    self.active_series = name
                    break

    @property
    def completed_set(self) -> set[str]:
        return set(self.completed_book_ids)

    def is_completed(self, book_id: str) -> bool:
        return book_id in self.completed_book_ids

    def get_series_state(self, series_name: str) -> SeriesState | None:
        """Persisted state for a series, or None if never recorded."""
        return self.series_state.get(series_name)

    def series_status(self, series_name: str) -> SeriesStatus:
        info = self.series_state.get(series_name)
        return info.status if info else SeriesStatus.UNSTARTED

    def with_series_state(self, series_name: str, info: SeriesState) -> AppState:
        """
        Return new state with one series entry replaced.

        Keeps active_series in step with the entry: activating a series
        takes the lock (any other active series is paused), and moving
        the locked series out of ACTIVE releases it.
        """
        new_series = self.series_state.copy()
        active = self.active_series

        if info.status == SeriesStatus.ACTIVE:
            if active and active != series_name:
                previous = new_series.get(active)
                if previous and previous.status == SeriesStatus.ACTIVE:
                    new_series[active] = previous.with_status(SeriesStatus.PAUSED)
            active = series_name
        elif active == series_name:
            active = None

        new_series[series_name] = info
        return self._copy_with(series_state=new_series, active_series=active)

    def touch(self) -> AppState:
        """Return new state with a refreshed updated_at."""
        return self._copy_with(updated_at=utc_now())

    def _copy_with(self, **kwargs) -> AppState:
        """Create a copy with some fields replaced."""
        return AppState(
            state_id=kwargs.get("state_id", self.state_id),
            completed_book_ids=kwargs.get("completed_book_ids", self.completed_book_ids),
            series_state=kwargs.get("series_state", self.series_state),
            current_pick_id=kwargs.get("current_pick_id", self.current_pick_id),
            pending_decision=kwargs.get("pending_decision", self.pending_decision),
            active_series=kwargs.get("active_series", self.active_series),
            updated_at=kwargs.get("updated_at", self.updated_at),
            version=kwargs.get("version", self.version),
        )

    def clone(self) -> AppState:
        """Deep copy the state."""
        return deepcopy(self)


@dataclass
class AppModeInfo:
    """Current mode plus the series it concerns, if any."""
    mode: AppMode
    series_name: str | None = None
    next_order: int | None = None


@dataclass
class PickResult:
    """
    Outcome of a draw. Not persisted.

    eligible_count is 1 for forced picks and 0 when nothing is left.
    """
    book: Book | None
    forced: bool
    reason: str
    eligible_count: int


@dataclass
class Eligibility:
    """Whether a book can come up next, and why."""
    eligible: bool
    reason: str


@dataclass
class SeriesProgress:
    series_name: str
    completed: int
    total: int
    status: SeriesStatus
