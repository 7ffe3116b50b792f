"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between club clients and the picker.

Error Codes:
- BOOK_NOT_FOUND: Book id is not in the catalog
- SERIES_NOT_FOUND: Series name is not in the catalog
- ALREADY_COMPLETED: Book was already marked as read
- INVALID_TRANSITION: Series is not in the state the action needs
- INVALID_DECISION: Decision is not continue, pause or drop
- DECISION_REQUIRED: A series decision must be made first
- STATE_CONFLICT: Shared state kept changing; try again
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from ..engine_core.state import AppMode, SeriesStatus


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    BOOK_NOT_FOUND = "BOOK_NOT_FOUND"
    SERIES_NOT_FOUND = "SERIES_NOT_FOUND"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_DECISION = "INVALID_DECISION"
    DECISION_REQUIRED = "DECISION_REQUIRED"
    STATE_CONFLICT = "STATE_CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class SeriesInfo(BaseModel):
    """A book's place in its series."""
    name: str
    order: int
    total: int

    model_config = {"from_attributes": True}


class BookInfo(BaseModel):
    """Book information for display."""
    id: str
    title: str
    author: str
    genres: list[str] = Field(default_factory=list)
    series: Optional[SeriesInfo] = None
    description: Optional[str] = None
    cover_url: Optional[str] = None

    model_config = {"from_attributes": True}


class EligibilityInfo(BaseModel):
    """Whether a book can come up next, and why."""
    eligible: bool
    reason: str

    model_config = {"from_attributes": True}


class SeriesStateInfo(BaseModel):
    status: SeriesStatus
    next_order: int

    model_config = {"from_attributes": True}


class ModeInfo(BaseModel):
    """Current app mode."""
    mode: AppMode
    series_name: Optional[str] = None
    next_order: Optional[int] = None

    model_config = {"from_attributes": True}


class PickInfo(BaseModel):
    """Result of a draw."""
    book: Optional[BookInfo] = None
    forced: bool
    reason: str
    eligible_count: int

    model_config = {"from_attributes": True}


# =============================================================================
# Requests
# =============================================================================

class DecisionRequest(BaseModel):
    """Continue, pause or drop a series after its first book."""
    decision: str = Field(..., description="continue, pause or drop")
    actor: Optional[str] = Field(None, description="Member name, for the log")


class CurrentPickRequest(BaseModel):
    """Set the book being read; null clears it."""
    book_id: Optional[str] = None
    actor: Optional[str] = None


class ActorRequest(BaseModel):
    actor: Optional[str] = None


# =============================================================================
# Responses
# =============================================================================

class AppStateResponse(BaseModel):
    """The shared snapshot plus its derived mode."""
    state_id: str
    completed_book_ids: list[str]
    series_state: dict[str, SeriesStateInfo]
    current_pick_id: Optional[str] = None
    current_pick: Optional[BookInfo] = None
    pending_decision: Optional[str] = None
    active_series: Optional[str] = None
    updated_at: str
    version: int
    mode: ModeInfo


class ActionResponse(BaseModel):
    """Outcome of a state-changing request."""
    success: bool = True
    changes: list[str] = Field(default_factory=list)
    pick: Optional[PickInfo] = None
    state: AppStateResponse


class BookResponse(BaseModel):
    book: BookInfo
    eligibility: EligibilityInfo


class BookListResponse(BaseModel):
    books: list[BookResponse]
    count: int


class SeriesProgressResponse(BaseModel):
    series_name: str
    completed: int
    total: int
    status: SeriesStatus
    next_order: Optional[int] = None

    model_config = {"from_attributes": True}


class SeriesListResponse(BaseModel):
    series: list[SeriesProgressResponse]
    count: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
