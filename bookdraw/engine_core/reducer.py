"""
Reducer - Applies actions to the app state.

The reducer is the single point of state mutation for callers.
All state changes should go through Reducer.apply() / apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying (strict mode)
- Returns ActionResult with success/failure
- Delegates the rules themselves to the picker functions
"""

from __future__ import annotations
import logging
import random
from dataclasses import dataclass, field

from . import picker
from .state import AppState, Book, SeriesDecision, SeriesStatus
from .action import Action, ActionType, ActionResult, ErrorCode

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to app state.

    Stateless - all state is in AppState. The catalog provides the books.

    With strict=False, validation is skipped and the picker's silent
    no-op behaviour applies to misuse (unknown books, wrong series status).
    """
    catalog: list[Book]
    strict: bool = True
    rng: random.Random | None = None
    _books: dict[str, Book] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._books = {book.id: book for book in self.catalog}

    def apply(self, state: AppState, action: Action) -> ActionResult:
        """
        Apply an action to the app state.

        Returns ActionResult with new state or error.
        """
        if self.strict:
            failure = self._validate_action(state, action)
            if failure:
                logger.info(
                    "Rejected %s: %s", action.action_type.value, failure.error
                )
                return failure

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.NO_HANDLER,
            )

        try:
            return handler(state, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code=ErrorCode.HANDLER_ERROR)

    def _validate_action(self, state: AppState, action: Action) -> ActionResult | None:
        """
        Validate that an action is legal in the current state.

        Returns a failure result if invalid, None if valid.
        """
        payload = action.payload
        kind = action.action_type

        if kind == ActionType.DRAW:
            if state.pending_decision:
                return ActionResult.failure(
                    f'Decide on "{state.pending_decision}" before drawing',
                    ErrorCode.DECISION_REQUIRED,
                )

        elif kind == ActionType.SET_CURRENT_PICK:
            if payload.book_id is not None and payload.book_id not in self._books:
                return ActionResult.failure(
                    f"Book {payload.book_id} not found", ErrorCode.BOOK_NOT_FOUND
                )

        elif kind == ActionType.COMPLETE_BOOK:
            if payload.book_id not in self._books:
                return ActionResult.failure(
                    f"Book {payload.book_id} not found", ErrorCode.BOOK_NOT_FOUND
                )
            if state.is_completed(payload.book_id):
                return ActionResult.failure(
                    f"Book {payload.book_id} is already completed",
                    ErrorCode.ALREADY_COMPLETED,
                )

        elif kind == ActionType.DECIDE_SERIES:
            try:
                SeriesDecision(payload.decision)
            except ValueError:
                return ActionResult.failure(
                    f"Unknown decision: {payload.decision}", ErrorCode.INVALID_DECISION
                )
            if state.pending_decision != payload.series_name:
                return ActionResult.failure(
                    f'No decision pending for "{payload.series_name}"',
                    ErrorCode.INVALID_TRANSITION,
                )

        elif kind in (ActionType.PAUSE_SERIES, ActionType.RESUME_SERIES):
            if payload.series_name not in state.series_state:
                return ActionResult.failure(
                    f'Series "{payload.series_name}" not found',
                    ErrorCode.SERIES_NOT_FOUND,
                )
            required = (
                SeriesStatus.ACTIVE if kind == ActionType.PAUSE_SERIES
                else SeriesStatus.PAUSED
            )
            current = state.series_status(payload.series_name)
            if current != required:
                return ActionResult.failure(
                    f'Series "{payload.series_name}" is {current.value}, not {required.value}',
                    ErrorCode.INVALID_TRANSITION,
                )

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.DRAW: self._handle_draw,
            ActionType.SET_CURRENT_PICK: self._handle_set_current_pick,
            ActionType.COMPLETE_BOOK: self._handle_complete_book,
            ActionType.DECIDE_SERIES: self._handle_decide_series,
            ActionType.PAUSE_SERIES: self._handle_pause_series,
            ActionType.RESUME_SERIES: self._handle_resume_series,
            ActionType.RESET_STATE: self._handle_reset_state,
        }
        return handlers.get(action_type)

    def _handle_draw(self, state: AppState, action: Action) -> ActionResult:
        """Pick the next book and make it the current pick."""
        pick = picker.pick_next_book(self.catalog, state, rng=self.rng)
        if pick.book is None:
            return ActionResult.success_with_state(state, changes=[pick.reason], pick=pick)

        new_state = picker.set_current_pick(state, pick.book.id)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Next up: {pick.book.title}", pick.reason],
            pick=pick,
        )

    def _handle_set_current_pick(self, state: AppState, action: Action) -> ActionResult:
        book_id = action.payload.book_id
        new_state = picker.set_current_pick(state, book_id)
        if book_id is None:
            return ActionResult.success_with_state(new_state, changes=["Current pick cleared"])
        book = self._books.get(book_id)
        title = book.title if book else book_id
        return ActionResult.success_with_state(new_state, changes=[f"Now reading {title}"])

    def _handle_complete_book(self, state: AppState, action: Action) -> ActionResult:
        """Mark a book read and report the series consequences."""
        book_id = action.payload.book_id
        new_state = picker.complete_book(self.catalog, state, book_id)
        book = self._books.get(book_id)
        if book is None:
            return ActionResult.success_with_state(new_state)

        changes = [f"Completed {book.title}"]
        if new_state.pending_decision and new_state.pending_decision != state.pending_decision:
            changes.append(f'Decide whether to continue "{new_state.pending_decision}"')

        if book.series:
            before = state.get_series_state(book.series.name)
            after = new_state.get_series_state(book.series.name)
            if before and after and before != after:
                if after.status == SeriesStatus.UNSTARTED:
                    changes.append(f'Finished the "{book.series.name}" series')
                else:
                    changes.append(
                        f'"{book.series.name}" continues with Book {after.next_order}'
                    )

        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_decide_series(self, state: AppState, action: Action) -> ActionResult:
        name = action.payload.series_name
        decision = SeriesDecision(action.payload.decision)
        new_state = picker.decide_series(state, name, decision)

        changes = [f'"{name}": {decision.value}']
        if state.active_series and state.active_series != new_state.active_series:
            if decision == SeriesDecision.CONTINUE:
                changes.append(f'Paused "{state.active_series}"')
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_pause_series(self, state: AppState, action: Action) -> ActionResult:
        name = action.payload.series_name
        new_state = picker.pause_series(state, name)
        changes = [f'Paused "{name}"'] if new_state is not state else []
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_resume_series(self, state: AppState, action: Action) -> ActionResult:
        name = action.payload.series_name
        new_state = picker.resume_series(state, name)
        changes = [f'Resumed "{name}"'] if new_state is not state else []
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_reset_state(self, state: AppState, action: Action) -> ActionResult:
        """Start over; the store's version token is carried across."""
        new_state = picker.create_initial_state(self.catalog)._copy_with(
            state_id=state.state_id,
            version=state.version,
        )
        return ActionResult.success_with_state(new_state, changes=["State reset"])


def apply_action(
    catalog: list[Book],
    state: AppState,
    action: Action,
    strict: bool = True,
) -> ActionResult:
    """Convenience function to apply an action."""
    reducer = Reducer(catalog=catalog, strict=strict)
    return reducer.apply(state, action)
