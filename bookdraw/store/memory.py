"""
In-memory store - keeps the snapshot in process.

Used when no state file is configured, and by the tests.
"""

from __future__ import annotations
import threading

from ..engine_core.state import AppState
from .base import StateStore


class InMemoryStateStore(StateStore):
    """
    Thread-safe in-process store.
    Snapshots are cloned on the way in and out.
    """

    def __init__(self, initial: AppState | None = None) -> None:
        self._lock = threading.Lock()
        self._state: AppState | None = initial.clone() if initial else None

    def load(self) -> AppState | None:
        with self._lock:
            return self._state.clone() if self._state else None

    def save(self, state: AppState, expected_version: int | None = None) -> AppState:
        with self._lock:
            current = self._state.version if self._state else 0
            self._check_version(expected_version, current)
            stored = state._copy_with(version=current + 1).clone()
            self._state = stored
            return stored.clone()

    def clear(self) -> None:
        with self._lock:
            self._state = None
