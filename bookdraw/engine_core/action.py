"""
Action System - Actions, payloads, and results.

Actions represent what a club member did:
1. Draw the next book
2. Start reading a book / finish it
3. Decide on, pause or resume a series
4. Reset the shared state

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .state import AppState, PickResult, SeriesDecision


class ActionType(Enum):
    """Types of actions in the system."""
    DRAW = "draw"
    SET_CURRENT_PICK = "set_current_pick"
    COMPLETE_BOOK = "complete_book"
    DECIDE_SERIES = "decide_series"
    PAUSE_SERIES = "pause_series"
    RESUME_SERIES = "resume_series"
    RESET_STATE = "reset_state"


class ErrorCode(str, Enum):
    """Failure codes reported by the reducer."""
    BOOK_NOT_FOUND = "BOOK_NOT_FOUND"
    SERIES_NOT_FOUND = "SERIES_NOT_FOUND"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_DECISION = "INVALID_DECISION"
    DECISION_REQUIRED = "DECISION_REQUIRED"
    NO_HANDLER = "NO_HANDLER"
    HANDLER_ERROR = "HANDLER_ERROR"


@dataclass
class ActionPayload:
    """
    Payload for an action.

    Different action types use different fields; the reducer validates.
    """
    book_id: str | None = None
    series_name: str | None = None
    decision: str | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the app state.

    Actions are validated before application and applied
    atomically by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    actor: str | None = None  # Display name of the member, for logs

    @classmethod
    def draw(cls, actor: str | None = None) -> Action:
        """Factory for drawing the next book."""
        return cls(action_type=ActionType.DRAW, actor=actor)

    @classmethod
    def set_current_pick(cls, book_id: str | None, actor: str | None = None) -> Action:
        """Factory for setting (or clearing) the book being read."""
        return cls(
            action_type=ActionType.SET_CURRENT_PICK,
            payload=ActionPayload(book_id=book_id),
            actor=actor,
        )

    @classmethod
    def complete_book(cls, book_id: str, actor: str | None = None) -> Action:
        """Factory for finishing a book."""
        return cls(
            action_type=ActionType.COMPLETE_BOOK,
            payload=ActionPayload(book_id=book_id),
            actor=actor,
        )

    @classmethod
    def decide_series(
        cls,
        series_name: str,
        decision: SeriesDecision | str,
        actor: str | None = None,
    ) -> Action:
        """Factory for a continue/pause/drop decision."""
        if isinstance(decision, SeriesDecision):
            decision = decision.value
        return cls(
            action_type=ActionType.DECIDE_SERIES,
            payload=ActionPayload(series_name=series_name, decision=decision),
            actor=actor,
        )

    @classmethod
    def pause_series(cls, series_name: str, actor: str | None = None) -> Action:
        return cls(
            action_type=ActionType.PAUSE_SERIES,
            payload=ActionPayload(series_name=series_name),
            actor=actor,
        )

    @classmethod
    def resume_series(cls, series_name: str, actor: str | None = None) -> Action:
        return cls(
            action_type=ActionType.RESUME_SERIES,
            payload=ActionPayload(series_name=series_name),
            actor=actor,
        )

    @classmethod
    def reset_state(cls, actor: str | None = None) -> Action:
        return cls(action_type=ActionType.RESET_STATE, actor=actor)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - New state (if succeeded)
    - Error and error code (if failed)
    - The pick, for draws
    - Human-readable changes for display
    """
    success: bool
    new_state: AppState | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    pick: PickResult | None = None
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: AppState,
        changes: list[str] | None = None,
        pick: PickResult | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            changes=changes or [],
            pick=pick,
        )
