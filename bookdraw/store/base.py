"""
State Store - Where the shared snapshot lives between actions.

The store:
- Holds exactly one AppState snapshot (the "global" row)
- Hands out copies, never its own instance
- Uses the snapshot version as an optimistic-concurrency token

save(state, expected_version=v) succeeds only if the stored version is
still v; the saved snapshot comes back with version v + 1. Callers that
lose the race reload and re-run their action.
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from ..engine_core.state import AppState


class StateStoreError(Exception):
    """Raised when the stored snapshot cannot be read or written."""


class StaleStateError(StateStoreError):
    """Raised when a save is based on an outdated snapshot."""

    def __init__(self, expected_version: int, actual_version: int):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"State changed underneath (expected version {expected_version}, "
            f"found {actual_version})"
        )


class StateStore(ABC):
    """Abstract snapshot store."""

    @abstractmethod
    def load(self) -> AppState | None:
        """Return the stored snapshot, or None if nothing was saved yet."""

    @abstractmethod
    def save(self, state: AppState, expected_version: int | None = None) -> AppState:
        """
        Store a snapshot.

        Args:
            state: Snapshot to store
            expected_version: Version the caller based its change on;
                None skips the check

        Returns:
            The stored snapshot with its new version

        Raises:
            StaleStateError: if expected_version does not match
        """

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored snapshot."""

    @staticmethod
    def _check_version(expected_version: int | None, actual_version: int) -> None:
        if expected_version is not None and expected_version != actual_version:
            raise StaleStateError(expected_version, actual_version)
