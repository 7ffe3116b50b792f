"""
Store Module - Persistence of the shared AppState snapshot.

There is one logical snapshot for the whole club, keyed "global".
Stores only load and save it; the picker never touches storage.
"""

from .base import StateStore, StateStoreError, StaleStateError
from .memory import InMemoryStateStore
from .json_file import JsonFileStateStore
from .records import AppStateRecord, SeriesStateRecord
from .adapter import backfill_series, load_or_initialize, record_to_state, state_to_record

__all__ = [
    "StateStore",
    "StateStoreError",
    "StaleStateError",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "AppStateRecord",
    "SeriesStateRecord",
    "backfill_series",
    "load_or_initialize",
    "record_to_state",
    "state_to_record",
]
