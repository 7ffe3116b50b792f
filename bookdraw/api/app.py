"""
FastAPI Application - REST API for club clients.

Endpoints:
    GET    /api/v1/books                        Catalog with eligibility
    GET    /api/v1/books/{id}                   One book with eligibility
    POST   /api/v1/books/{id}/complete          Mark a book as read
    GET    /api/v1/state                        Shared snapshot + mode
    GET    /api/v1/mode                         Current mode only
    POST   /api/v1/draw                         Draw the next book
    PUT    /api/v1/current-pick                 Set or clear the current book
    POST   /api/v1/state/reset                  Start over
    GET    /api/v1/series                       Progress of every series
    GET    /api/v1/series/{name}                Progress of one series
    POST   /api/v1/series/{name}/decision       Continue / pause / drop
    POST   /api/v1/series/{name}/pause          Pause the active series
    POST   /api/v1/series/{name}/resume         Resume a paused series

Clients poll /state; the snapshot version tells them whether anything
changed. All responses are JSON with explicit Pydantic schemas.

Run with: uvicorn --factory bookdraw.api.app:create_app (or `bookdraw serve`).
"""

from typing import Optional, Union

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from ..engine_core.action import ActionResult
from ..engine_core.action import ErrorCode as EngineErrorCode
from ..engine_core.picker import get_app_mode
from ..engine_core.state import AppState, Book, PickResult, SeriesProgress
from ..store import StaleStateError
from .service import PickerService
from .schemas import (
    # Request models
    ActorRequest,
    CurrentPickRequest,
    DecisionRequest,
    # Response models
    ActionResponse,
    AppStateResponse,
    BookListResponse,
    BookResponse,
    ErrorResponse,
    HealthResponse,
    SeriesListResponse,
    SeriesProgressResponse,
    # Enums
    ErrorCode,
    # Nested models
    BookInfo,
    EligibilityInfo,
    ModeInfo,
    PickInfo,
    SeriesStateInfo,
)

ERROR_STATUS = {
    ErrorCode.BOOK_NOT_FOUND: 404,
    ErrorCode.SERIES_NOT_FOUND: 404,
    ErrorCode.ALREADY_COMPLETED: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.DECISION_REQUIRED: 409,
    ErrorCode.STATE_CONFLICT: 409,
    ErrorCode.INVALID_DECISION: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: Optional[PickerService] = None, settings: Optional[Settings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional PickerService instance (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()
    picker_service = service or PickerService.from_settings(settings)

    app = FastAPI(
        title="Bookdraw API",
        description="""
Book club picker - draws the next book and keeps series in order.

## Modes

| Mode | Meaning |
|------|---------|
| `decision_required` | A series pilot was finished; continue, pause or drop it |
| `series_lock` | A series is active; the next draw is its next book |
| `random_draw` | The next book is drawn from the eligible pool |

## Error Codes

| Code | Description |
|------|-------------|
| `BOOK_NOT_FOUND` | Book id is not in the catalog |
| `SERIES_NOT_FOUND` | Series is not in the catalog |
| `ALREADY_COMPLETED` | Book was already read |
| `INVALID_TRANSITION` | Series is not in the required state |
| `DECISION_REQUIRED` | Resolve the pending decision first |
| `STATE_CONFLICT` | Shared state kept changing; retry |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error_code, 400),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            details={"errors": jsonable_encoder(exc.errors())},
        )

    def run_action(command, *args, **kwargs) -> Union[ActionResponse, JSONResponse]:
        """Run a service command and convert its result."""
        try:
            result = command(*args, **kwargs)
        except StaleStateError as e:
            return make_error_response(
                ErrorCode.STATE_CONFLICT,
                str(e),
                details={
                    "expected_version": e.expected_version,
                    "actual_version": e.actual_version,
                },
            )
        if not result.success:
            return make_error_response(_api_error_code(result), result.error)
        return _action_response(result)

    # =========================================================================
    # Books
    # =========================================================================

    @app.get(
        "/api/v1/books",
        response_model=BookListResponse,
        tags=["Books"],
        summary="List the catalog with eligibility",
    )
    def list_books() -> BookListResponse:
        books = [
            BookResponse(
                book=_book_info(book),
                eligibility=EligibilityInfo.model_validate(eligibility),
            )
            for book, eligibility in picker_service.list_books()
        ]
        return BookListResponse(books=books, count=len(books))

    @app.get(
        "/api/v1/books/{book_id}",
        response_model=BookResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Books"],
        summary="Get one book with its eligibility",
    )
    def get_book(book_id: str) -> Union[BookResponse, JSONResponse]:
        book = picker_service.get_book(book_id)
        if book is None:
            return make_error_response(ErrorCode.BOOK_NOT_FOUND, f"Book {book_id} not found")
        return BookResponse(
            book=_book_info(book),
            eligibility=EligibilityInfo.model_validate(
                picker_service.book_eligibility(book_id)
            ),
        )

    @app.post(
        "/api/v1/books/{book_id}/complete",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Reading"],
        summary="Mark a book as read",
    )
    def complete_book(
        book_id: str,
        body: Optional[ActorRequest] = None,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Mark a book as read.

        Finishing Book 1 of a new series switches the app to
        `decision_required`. Finishing the last book of the active series
        resets that series so it can be read again some day.
        """
        return run_action(picker_service.complete_book, book_id, actor=_actor(body))

    # =========================================================================
    # State & Drawing
    # =========================================================================

    @app.get(
        "/api/v1/state",
        response_model=AppStateResponse,
        tags=["State"],
        summary="Get the shared state",
    )
    def get_state() -> AppStateResponse:
        return _state_response(picker_service.get_state())

    @app.get(
        "/api/v1/mode",
        response_model=ModeInfo,
        tags=["State"],
        summary="Get the current mode",
    )
    def get_mode() -> ModeInfo:
        return ModeInfo.model_validate(picker_service.get_mode())

    @app.post(
        "/api/v1/draw",
        response_model=ActionResponse,
        responses={409: {"model": ErrorResponse}},
        tags=["Reading"],
        summary="Draw the next book",
    )
    def draw(body: Optional[ActorRequest] = None) -> Union[ActionResponse, JSONResponse]:
        """
        Draw the next book and make it the current pick.

        In `series_lock` mode the result is forced. When nothing is left
        the response has `pick.book = null` and `eligible_count = 0`.
        """
        return run_action(picker_service.draw, actor=_actor(body))

    @app.put(
        "/api/v1/current-pick",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Reading"],
        summary="Set or clear the book being read",
    )
    def set_current_pick(body: CurrentPickRequest) -> Union[ActionResponse, JSONResponse]:
        return run_action(picker_service.set_current_pick, body.book_id, actor=body.actor)

    @app.post(
        "/api/v1/state/reset",
        response_model=ActionResponse,
        tags=["State"],
        summary="Reset the shared state",
    )
    def reset_state(body: Optional[ActorRequest] = None) -> Union[ActionResponse, JSONResponse]:
        return run_action(picker_service.reset_state, actor=_actor(body))

    # =========================================================================
    # Series
    # =========================================================================

    @app.get(
        "/api/v1/series",
        response_model=SeriesListResponse,
        tags=["Series"],
        summary="Progress of every series",
    )
    def list_series() -> SeriesListResponse:
        state = picker_service.get_state()
        series = [_series_response(p, state) for p in picker_service.list_series()]
        return SeriesListResponse(series=series, count=len(series))

    @app.get(
        "/api/v1/series/{series_name}",
        response_model=SeriesProgressResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Series"],
        summary="Progress of one series",
    )
    def get_series(series_name: str) -> Union[SeriesProgressResponse, JSONResponse]:
        progress = picker_service.series_progress(series_name)
        if progress is None:
            return make_error_response(
                ErrorCode.SERIES_NOT_FOUND, f'Series "{series_name}" not found'
            )
        return _series_response(progress, picker_service.get_state())

    @app.post(
        "/api/v1/series/{series_name}/decision",
        response_model=ActionResponse,
        responses={409: {"model": ErrorResponse}},
        tags=["Series"],
        summary="Continue, pause or drop a series",
    )
    def decide_series(
        series_name: str,
        body: DecisionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Resolve the pending decision for a series.

        **Request Body:**
        ```json
        {"decision": "continue"}
        ```
        """
        return run_action(
            picker_service.decide_series, series_name, body.decision, actor=body.actor
        )

    @app.post(
        "/api/v1/series/{series_name}/pause",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Series"],
        summary="Pause the active series",
    )
    def pause_series(
        series_name: str,
        body: Optional[ActorRequest] = None,
    ) -> Union[ActionResponse, JSONResponse]:
        return run_action(picker_service.pause_series, series_name, actor=_actor(body))

    @app.post(
        "/api/v1/series/{series_name}/resume",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Series"],
        summary="Resume a paused series",
    )
    def resume_series(
        series_name: str,
        body: Optional[ActorRequest] = None,
    ) -> Union[ActionResponse, JSONResponse]:
        return run_action(picker_service.resume_series, series_name, actor=_actor(body))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="healthy", service="bookdraw", version=__version__)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Bookdraw API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _state_response(state: AppState) -> AppStateResponse:
        current = (
            picker_service.get_book(state.current_pick_id)
            if state.current_pick_id else None
        )
        return AppStateResponse(
            state_id=state.state_id,
            completed_book_ids=list(state.completed_book_ids),
            series_state={
                name: SeriesStateInfo.model_validate(info)
                for name, info in state.series_state.items()
            },
            current_pick_id=state.current_pick_id,
            current_pick=_book_info(current) if current else None,
            pending_decision=state.pending_decision,
            active_series=state.active_series,
            updated_at=state.updated_at,
            version=state.version,
            mode=ModeInfo.model_validate(get_app_mode(state)),
        )

    def _action_response(result: ActionResult) -> ActionResponse:
        return ActionResponse(
            success=True,
            changes=result.changes,
            pick=_pick_info(result.pick) if result.pick else None,
            state=_state_response(result.new_state),
        )

    return app


def _actor(body: Optional[ActorRequest]) -> Optional[str]:
    return body.actor if body else None


def _api_error_code(result: ActionResult) -> ErrorCode:
    """Map a reducer failure onto the API's error codes."""
    if result.error_code in (EngineErrorCode.NO_HANDLER, EngineErrorCode.HANDLER_ERROR, None):
        return ErrorCode.INTERNAL_ERROR
    return ErrorCode(result.error_code.value)


def _book_info(book: Book) -> BookInfo:
    return BookInfo.model_validate(book)


def _pick_info(pick: PickResult) -> PickInfo:
    return PickInfo(
        book=_book_info(pick.book) if pick.book else None,
        forced=pick.forced,
        reason=pick.reason,
        eligible_count=pick.eligible_count,
    )


def _series_response(progress: SeriesProgress, state: AppState) -> SeriesProgressResponse:
    info = state.get_series_state(progress.series_name)
    return SeriesProgressResponse(
        series_name=progress.series_name,
        completed=progress.completed,
        total=progress.total,
        status=progress.status,
        next_order=info.next_order if info else None,
    )

