"""
API Module - HTTP interface for club clients.

Exposes the picker via a REST API. Clients:
1. Poll the shared state
2. Draw the next book
3. Mark books as read
4. Decide on, pause and resume series

The FastAPI app lives in bookdraw.api.app (uvicorn --factory bookdraw.api.app:create_app).
"""

from .schemas import (
    # Requests
    ActorRequest,
    CurrentPickRequest,
    DecisionRequest,
    # Responses
    ActionResponse,
    AppStateResponse,
    BookListResponse,
    BookResponse,
    ErrorResponse,
    HealthResponse,
    SeriesListResponse,
    SeriesProgressResponse,
    # Shared
    BookInfo,
    EligibilityInfo,
    ErrorCode,
    ModeInfo,
    PickInfo,
    SeriesInfo,
    SeriesStateInfo,
)
from .service import PickerService

__all__ = [
    # Requests
    "ActorRequest",
    "CurrentPickRequest",
    "DecisionRequest",
    # Responses
    "ActionResponse",
    "AppStateResponse",
    "BookListResponse",
    "BookResponse",
    "ErrorResponse",
    "HealthResponse",
    "SeriesListResponse",
    "SeriesProgressResponse",
    # Shared
    "BookInfo",
    "EligibilityInfo",
    "ErrorCode",
    "ModeInfo",
    "PickInfo",
    "SeriesInfo",
    "SeriesStateInfo",
    # Service
    "PickerService",
]
