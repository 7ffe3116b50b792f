"""
Persisted record shapes.

The record mirrors the shared app_state row: snake_case top-level
columns, with each series entry stored as {"status", "nextOrder"}.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from ..engine_core.state import GLOBAL_STATE_ID, SeriesStatus


class SeriesStateRecord(BaseModel):
    """One series entry as stored."""
    model_config = ConfigDict(populate_by_name=True)

    status: SeriesStatus = SeriesStatus.UNSTARTED
    next_order: int = Field(1, alias="nextOrder", ge=1)


class AppStateRecord(BaseModel):
    """The app_state row."""
    id: str = GLOBAL_STATE_ID
    completed_book_ids: list[str] = Field(default_factory=list)
    series_state: dict[str, SeriesStateRecord] = Field(default_factory=dict)
    current_pick_id: Optional[str] = None
    pending_decision: Optional[str] = None
    active_series: Optional[str] = None
    updated_at: str
    version: int = 0
