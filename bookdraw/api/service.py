"""
Picker Service - Business logic layer between transports and the engine.

The service:
1. Loads the shared snapshot (creating it on first use)
2. Runs one action through the reducer
3. Saves the new snapshot with an optimistic version check
4. Re-runs the action on a fresh snapshot if someone else saved first

This layer is framework-agnostic (used by the FastAPI app and the CLI).
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field

from ..engine_core import picker
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.state import (
    AppModeInfo,
    AppState,
    Book,
    Eligibility,
    PickResult,
    SeriesDecision,
    SeriesProgress,
)
from ..catalog import load_catalog, sample_catalog, validate_catalog
from ..config import Settings
from ..store import (
    InMemoryStateStore,
    JsonFileStateStore,
    StaleStateError,
    StateStore,
    load_or_initialize,
)

logger = logging.getLogger(__name__)


@dataclass
class PickerService:
    """
    Main service for the club's shared picker.

    Usage:
        service = PickerService(catalog=load_catalog("books.json"),
                                store=JsonFileStateStore("state.json"))

        result = service.draw()
        result = service.complete_book("mistborn_1")
        result = service.decide_series("Mistborn", "continue")
    """
    catalog: list[Book]
    store: StateStore = field(default_factory=InMemoryStateStore)
    strict: bool = True
    max_retries: int = 3
    rng: random.Random | None = None

    _reducer: Reducer = field(init=False, repr=False)
    _books: dict[str, Book] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._reducer = Reducer(catalog=self.catalog, strict=self.strict, rng=self.rng)
        self._books = {book.id: book for book in self.catalog}

    @classmethod
    def from_settings(cls, settings: Settings) -> PickerService:
        """
        Build the service from configuration.

        Raises:
            CatalogError: if the catalog file cannot be loaded
            CatalogValidationError: if the catalog breaks the series rules
        """
        if settings.catalog_path:
            catalog = load_catalog(settings.catalog_path)
        else:
            catalog = sample_catalog()
        report = validate_catalog(catalog, raise_on_error=True)
        for warning in report.warnings:
            logger.warning("Catalog: %s", warning)

        if settings.state_file:
            store: StateStore = JsonFileStateStore(settings.state_file)
        else:
            store = InMemoryStateStore()

        return cls(catalog=catalog, store=store, max_retries=settings.save_retries)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_state(self) -> AppState:
        return load_or_initialize(self.store, self.catalog)

    def get_mode(self) -> AppModeInfo:
        return picker.get_app_mode(self.get_state())

    def get_book(self, book_id: str) -> Book | None:
        return self._books.get(book_id)

    def book_eligibility(self, book_id: str) -> Eligibility | None:
        book = self.get_book(book_id)
        if book is None:
            return None
        return picker.get_book_eligibility(book, self.get_state())

    def list_books(self) -> list[tuple[Book, Eligibility]]:
        """Every catalog book with its current eligibility."""
        state = self.get_state()
        return [(book, picker.get_book_eligibility(book, state)) for book in self.catalog]

    def series_names(self) -> list[str]:
        return picker.list_series_names(self.catalog)

    def series_progress(self, series_name: str) -> SeriesProgress | None:
        if series_name not in self.series_names():
            return None
        return picker.get_series_progress(self.catalog, self.get_state(), series_name)

    def list_series(self) -> list[SeriesProgress]:
        state = self.get_state()
        return [
            picker.get_series_progress(self.catalog, state, name)
            for name in self.series_names()
        ]

    def preview_pick(self) -> PickResult:
        """What a draw would return right now, without recording it."""
        return picker.pick_next_book(self.catalog, self.get_state(), rng=self.rng)

    # =========================================================================
    # Commands
    # =========================================================================

    def draw(self, actor: str | None = None) -> ActionResult:
        return self.apply(Action.draw(actor=actor))

    def set_current_pick(self, book_id: str | None, actor: str | None = None) -> ActionResult:
        return self.apply(Action.set_current_pick(book_id, actor=actor))

    def complete_book(self, book_id: str, actor: str | None = None) -> ActionResult:
        return self.apply(Action.complete_book(book_id, actor=actor))

    def decide_series(
        self,
        series_name: str,
        decision: SeriesDecision | str,
        actor: str | None = None,
    ) -> ActionResult:
        return self.apply(Action.decide_series(series_name, decision, actor=actor))

    def pause_series(self, series_name: str, actor: str | None = None) -> ActionResult:
        return self.apply(Action.pause_series(series_name, actor=actor))

    def resume_series(self, series_name: str, actor: str | None = None) -> ActionResult:
        return self.apply(Action.resume_series(series_name, actor=actor))

    def reset_state(self, actor: str | None = None) -> ActionResult:
        return self.apply(Action.reset_state(actor=actor))

    def apply(self, action: Action) -> ActionResult:
        """
        Run one action against the stored snapshot and persist the result.

        Raises:
            StaleStateError: if every attempt lost the race to another writer
        """
        last_error: StaleStateError | None = None

        attempts = max(self.max_retries, 1)
        for attempt in range(1, attempts + 1):
            state = self.get_state()
            result = self._reducer.apply(state, action)
            if not result.success or result.new_state is state:
                return result

            try:
                result.new_state = self.store.save(
                    result.new_state, expected_version=state.version
                )
            except StaleStateError as e:
                last_error = e
                logger.warning(
                    "%s attempt %d/%d lost a race: %s",
                    action.action_type.value,
                    attempt,
                    attempts,
                    e,
                )
                continue

            logger.info(
                "%s%s: %s",
                action.action_type.value,
                f" by {action.actor}" if action.actor else "",
                "; ".join(result.changes) or "no change",
            )
            return result

        raise last_error
