from __future__ import annotations

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Iterator

from pydantic import ValidationError

from api.config import STATE_FILE
from api.core.errors import PersistenceFailure
from api.core.models import AppState

logger = logging.getLogger(__name__)

_store = None

STATE_FILE_MODE = 0o644


class StateStore:
    """Owns the single AppState and its JSON snapshot on disk.

    Every read-then-write goes through :meth:`transaction`, which holds one
    lock, works on a copy and only swaps the copy in after it was written.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()
        self._state = AppState()

    def load(self) -> AppState:
        with self._lock:
            try:
                with open(self.path, "r", encoding="utf-8") as handle:
                    raw = handle.read()
            except FileNotFoundError:
                logger.info("No state file at %s; starting fresh.", self.path)
                self._state = AppState()
                return self.snapshot()
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Could not read state file %s: %s", self.path, exc)
                self._state = AppState()
                return self.snapshot()

            try:
                self._state = AppState.model_validate_json(raw)
            except ValidationError as exc:
                logger.warning(
                    "State file %s is invalid (%d errors); starting fresh.",
                    self.path,
                    exc.error_count(),
                )
                self._state = AppState()
            return self.snapshot()

    def snapshot(self) -> AppState:
        with self._lock:
            return self._state.model_copy(deep=True)

    @contextmanager
    def transaction(self) -> Iterator[AppState]:
        with self._lock:
            working = self._state.model_copy(deep=True)
            yield working
            self._write(working)
            self._state = working

    def _write(self, state: AppState) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".appData.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(state.model_dump_json(indent=2))
            os.chmod(tmp_path, STATE_FILE_MODE)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Failed to persist state to %s: %s", self.path, exc)
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceFailure(f"Failed to persist state: {exc}") from exc


def init_store(path: str | None = None) -> StateStore:
    global _store
    _store = StateStore(path or STATE_FILE)
    _store.load()
    return _store


def get_store() -> StateStore:
    if _store is None:
        init_store()
    return _store
