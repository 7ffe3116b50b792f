"""
Engine Core - Deterministic book selection state machine.

The engine is the runtime that:
1. Takes the static book catalog
2. Takes the current AppState snapshot
3. Derives the app mode and book eligibility
4. Applies member actions via the reducer
5. Returns new snapshots for the store to persist
"""

from .state import (
    AppMode,
    AppModeInfo,
    AppState,
    Book,
    Eligibility,
    PickResult,
    Series,
    SeriesDecision,
    SeriesProgress,
    SeriesState,
    SeriesStatus,
)
from .picker import (
    complete_book,
    create_initial_state,
    decide_series,
    eligible_pool,
    get_app_mode,
    get_book_eligibility,
    get_series_progress,
    initialize_series_state,
    merge_series_state,
    pause_series,
    pick_next_book,
    resume_series,
    set_current_pick,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .reducer import Reducer, apply_action

__all__ = [
    "AppMode",
    "AppModeInfo",
    "AppState",
    "Book",
    "Eligibility",
    "PickResult",
    "Series",
    "SeriesDecision",
    "SeriesProgress",
    "SeriesState",
    "SeriesStatus",
    "complete_book",
    "create_initial_state",
    "decide_series",
    "eligible_pool",
    "get_app_mode",
    "get_book_eligibility",
    "get_series_progress",
    "initialize_series_state",
    "merge_series_state",
    "pause_series",
    "pick_next_book",
    "resume_series",
    "set_current_pick",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "Reducer",
    "apply_action",
]
