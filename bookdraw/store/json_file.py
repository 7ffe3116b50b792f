"""
JSON file store - keeps the snapshot in a single JSON document.

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so readers never see a half-written file.
"""

from __future__ import annotations
import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import ValidationError

from ..engine_core.state import AppState
from .adapter import record_to_state, state_to_record
from .base import StateStore, StateStoreError
from .records import AppStateRecord

logger = logging.getLogger(__name__)


class JsonFileStateStore(StateStore):
    """
    File-backed store.

    Usage:
        store = JsonFileStateStore("~/.bookdraw/state.json")
        state = store.load()
        store.save(new_state, expected_version=state.version)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def load(self) -> AppState | None:
        with self._lock:
            record = self._read()
        return record_to_state(record) if record else None

    def save(self, state: AppState, expected_version: int | None = None) -> AppState:
        with self._lock:
            existing = self._read()
            current = existing.version if existing else 0
            self._check_version(expected_version, current)

            record = state_to_record(state._copy_with(version=current + 1))
            self._write(record)
            logger.debug("Saved state version %d to %s", record.version, self.path)
        return record_to_state(record)

    def clear(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)

    def _read(self) -> AppStateRecord | None:
        if not self.path.exists():
            return None
        try:
            return AppStateRecord.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise StateStoreError(f"Cannot read state file {self.path}: {e}") from e

    def _write(self, record: AppStateRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = record.model_dump_json(by_alias=True, indent=2)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise StateStoreError(f"Cannot write state file {self.path}: {e}") from e
