"""
Bookdraw CLI - Command-line interface for the picker.

Usage:
    bookdraw status                         Show mode, current book and series
    bookdraw draw                           Draw the next book
    bookdraw pick <book_id>                 Set the book being read
    bookdraw complete <book_id>             Mark a book as read
    bookdraw decide <series> <decision>     continue, pause or drop a series
    bookdraw pause <series>                 Pause the active series
    bookdraw resume <series>                Resume a paused series
    bookdraw books                          List books with eligibility
    bookdraw series                         List series progress
    bookdraw reset                          Start over
    bookdraw validate-catalog <file>        Check a catalog file
    bookdraw serve                          Run the HTTP API

State is kept in a JSON file (--state-file, default ~/.bookdraw/state.json).
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import Settings, configure_logging

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = str(Path.home() / ".bookdraw" / "state.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bookdraw - Book Club Picker",
        prog="bookdraw",
    )
    parser.add_argument("--catalog", help="Catalog JSON file (default: built-in sample)")
    parser.add_argument(
        "--state-file",
        default=None,
        help=f"State JSON file (default: $BOOKDRAW_STATE_FILE or {DEFAULT_STATE_FILE})",
    )
    parser.add_argument("--actor", help="Your name, recorded in the log")
    parser.add_argument("--log-level", default=None, help="debug, info, warning, error (default: warning)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("status", help="Show the current mode and progress")
    subparsers.add_parser("draw", help="Draw the next book")

    pick_parser = subparsers.add_parser("pick", help="Set the book being read")
    pick_parser.add_argument("book_id", help="Book id from the catalog")

    complete_parser = subparsers.add_parser("complete", help="Mark a book as read")
    complete_parser.add_argument("book_id", help="Book id from the catalog")

    decide_parser = subparsers.add_parser("decide", help="Decide on a series after Book 1")
    decide_parser.add_argument("series", help="Series name")
    decide_parser.add_argument("decision", choices=["continue", "pause", "drop"])

    pause_parser = subparsers.add_parser("pause", help="Pause the active series")
    pause_parser.add_argument("series", help="Series name")

    resume_parser = subparsers.add_parser("resume", help="Resume a paused series")
    resume_parser.add_argument("series", help="Series name")

    subparsers.add_parser("books", help="List books with eligibility")
    subparsers.add_parser("series", help="List series progress")
    subparsers.add_parser("reset", help="Reset the shared state")

    validate_parser = subparsers.add_parser("validate-catalog", help="Validate a catalog file")
    validate_parser.add_argument("catalog_file", help="Path to catalog JSON")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.catalog:
        settings.catalog_path = args.catalog
    settings.state_file = args.state_file or settings.state_file or DEFAULT_STATE_FILE
    if args.log_level:
        settings.log_level = args.log_level.lower()
    configure_logging(args.log_level or "warning")

    commands = {
        "status": cmd_status,
        "draw": cmd_draw,
        "pick": cmd_pick,
        "complete": cmd_complete,
        "decide": cmd_decide,
        "pause": cmd_pause,
        "resume": cmd_resume,
        "books": cmd_books,
        "series": cmd_series,
        "reset": cmd_reset,
        "validate-catalog": cmd_validate_catalog,
        "serve": cmd_serve,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    from .store import StateStoreError

    try:
        command(args, settings)
    except StateStoreError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _service(settings):
    from .api.service import PickerService
    from .catalog import CatalogError, CatalogValidationError

    try:
        return PickerService.from_settings(settings)
    except CatalogValidationError as e:
        print(f"Error: {e}")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)
    except CatalogError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _run(settings, name, *args, **kwargs):
    """Run a service command, print its changes, exit 1 on failure."""
    service = _service(settings)
    result = getattr(service, name)(*args, **kwargs)

    if not result.success:
        print(f"Error: {result.error}")
        sys.exit(1)

    for change in result.changes:
        print(change)
    return service, result


def cmd_status(args, settings):
    """Show the current mode and progress."""
    from .engine_core.state import AppMode

    service = _service(settings)
    state = service.get_state()
    mode = service.get_mode()

    if mode.mode == AppMode.DECISION_REQUIRED:
        print(f'Decision required: continue, pause or drop "{mode.series_name}"?')
    elif mode.mode == AppMode.SERIES_LOCK:
        print(f'Series lock: "{mode.series_name}" continues with Book {mode.next_order}')
    else:
        print("Random draw")

    if state.current_pick_id:
        book = service.get_book(state.current_pick_id)
        title = book.title if book else state.current_pick_id
        print(f"Reading: {title}")

    print(f"Completed: {len(state.completed_book_ids)} of {len(service.catalog)} books")
    for progress in service.list_series():
        print(
            f"  {progress.series_name}: {progress.completed}/{progress.total} "
            f"({progress.status.value})"
        )


def cmd_draw(args, settings):
    """Draw the next book."""
    _, result = _run(settings, "draw", actor=args.actor)
    if result.pick and result.pick.book is None:
        sys.exit(1)


def cmd_pick(args, settings):
    _run(settings, "set_current_pick", args.book_id, actor=args.actor)


def cmd_complete(args, settings):
    _run(settings, "complete_book", args.book_id, actor=args.actor)


def cmd_decide(args, settings):
    _run(settings, "decide_series", args.series, args.decision, actor=args.actor)


def cmd_pause(args, settings):
    _run(settings, "pause_series", args.series, actor=args.actor)


def cmd_resume(args, settings):
    _run(settings, "resume_series", args.series, actor=args.actor)


def cmd_reset(args, settings):
    _run(settings, "reset_state", actor=args.actor)


def cmd_books(args, settings):
    """List books with eligibility."""
    service = _service(settings)
    for book, eligibility in service.list_books():
        mark = "*" if eligibility.eligible else " "
        print(f"{mark} {book.id:<28} {book.title} - {eligibility.reason}")


def cmd_series(args, settings):
    service = _service(settings)
    state = service.get_state()
    for progress in service.list_series():
        info = state.get_series_state(progress.series_name)
        next_order = info.next_order if info else 1
        print(
            f"{progress.series_name}: {progress.status.value}, "
            f"{progress.completed}/{progress.total} read, next Book {next_order}"
        )


def cmd_validate_catalog(args, settings):
    """Validate a catalog file."""
    from .catalog import CatalogError, load_catalog, validate_catalog

    try:
        catalog = load_catalog(args.catalog_file)
    except CatalogError as e:
        print(f"Error: {e}")
        sys.exit(1)

    result = validate_catalog(catalog)
    print(f"Books: {len(catalog)}")

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("Catalog is valid")


def cmd_serve(args, settings):
    """Run the HTTP API under uvicorn."""
    import uvicorn
    from .api.app import create_app

    app = create_app(service=_service(settings), settings=settings)
    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
