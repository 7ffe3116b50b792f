"""
State Adapter - Translates between stored records and AppState.

Also owns the snapshot lifecycle boundaries:
- load_or_initialize() creates the first snapshot when the store is empty
- series added to the catalog later are backfilled on load
"""

from __future__ import annotations
import logging
from typing import Any

from ..engine_core.picker import create_initial_state, merge_series_state
from ..engine_core.state import AppState, Book, SeriesState, SeriesStatus
from .base import StaleStateError
from .records import AppStateRecord, SeriesStateRecord

logger = logging.getLogger(__name__)


def state_to_record(state: AppState) -> AppStateRecord:
    """Convert AppState to its stored shape."""
    return AppStateRecord(
        id=state.state_id,
        completed_book_ids=list(state.completed_book_ids),
        series_state={
            name: SeriesStateRecord(status=info.status, next_order=info.next_order)
            for name, info in state.series_state.items()
        },
        current_pick_id=state.current_pick_id,
        pending_decision=state.pending_decision,
        active_series=state.active_series,
        updated_at=state.updated_at,
        version=state.version,
    )


def record_to_state(record: AppStateRecord | dict[str, Any]) -> AppState:
    """
    Convert a stored record to AppState.

    Accepts a raw dict (validated here). Records written before the
    active_series column existed may have several active series; the
    first keeps the lock and the rest are paused. A stored lock that
    names a series which is not active is ignored.
    """
    if not isinstance(record, AppStateRecord):
        record = AppStateRecord.model_validate(record)

    active = record.active_series
    locked = record.series_state.get(active) if active else None
    if active and (locked is None or locked.status != SeriesStatus.ACTIVE):
        logger.warning("Stored lock %r is not an active series; ignoring it", active)
        active = None

    series_state: dict[str, SeriesState] = {}
    for name, entry in record.series_state.items():
        status = entry.status
        if status == SeriesStatus.ACTIVE:
            if active is None:
                active = name
            elif active != name:
                logger.warning(
                    "Series %r is active alongside %r; pausing it", name, active
                )
                status = SeriesStatus.PAUSED
        series_state[name] = SeriesState(status=status, next_order=entry.next_order)

    return AppState(
        state_id=record.id,
        completed_book_ids=list(record.completed_book_ids),
        series_state=series_state,
        current_pick_id=record.current_pick_id,
        pending_decision=record.pending_decision,
        active_series=active,
        updated_at=record.updated_at,
        version=record.version,
    )


def backfill_series(catalog: list[Book], state: AppState) -> AppState:
    """Add catalog series missing from a persisted state. Persisted entries win."""
    merged = merge_series_state(catalog, state.series_state)
    if merged.keys() == state.series_state.keys():
        return state
    added = sorted(set(merged) - set(state.series_state))
    logger.info("Backfilled %d new series: %s", len(added), ", ".join(added))
    return state._copy_with(series_state=merged)


def load_or_initialize(store, catalog: list[Book]) -> AppState:
    """
    Load the shared snapshot, creating it on first use.

    The returned state carries the store's current version.
    """
    state = store.load()
    if state is None:
        logger.info("No stored state; creating initial snapshot")
        try:
            return store.save(create_initial_state(catalog), expected_version=0)
        except StaleStateError:
            # Another writer created it first
            state = store.load()
    return backfill_series(catalog, state)
