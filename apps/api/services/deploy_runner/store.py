from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Tuple

from .paths import state_paths
from .types import (
    OUTCOME_FAILED,
    OUTCOME_SUCCESSFUL,
    OUTCOME_UNKNOWN,
    STATUS_DEPLOYING,
    STATUS_IDLE,
    STATUS_UNKNOWN,
    StatePaths,
)
from .util import atomic_write_text, safe_mkdir

LOGGER = logging.getLogger(__name__)

STATUS_KEY = "status"
LAST_OUTCOME_KEY = "last_outcome"
LOG_KEY = "log"

_ALLOWED: Dict[str, set] = {
    STATUS_KEY: {STATUS_IDLE, STATUS_DEPLOYING},
    LAST_OUTCOME_KEY: {OUTCOME_SUCCESSFUL, OUTCOME_FAILED},
}


class StateStore:
    """
    Filesystem-backed store for the three deployment scalars.

    Layout:
      ${STATE_DIR}/logs/
        deployment_status.txt        (idle | deploying)
        last_deployment_status.txt   (successful | failed)
        deployment_log.txt           (append-only log blob)

    Reads never raise: a missing file yields the key's empty default, an
    unreadable one yields the degraded default and ``ok=False``. Writes are
    best-effort and report failure through the return value and the log.
    """

    def __init__(self, paths: StatePaths | None = None) -> None:
        self._paths = paths or state_paths()
        self._files: Dict[str, Path] = {
            STATUS_KEY: self._paths.status_path,
            LAST_OUTCOME_KEY: self._paths.last_outcome_path,
            LOG_KEY: self._paths.log_path,
        }
        try:
            safe_mkdir(self._paths.logs_dir)
        except OSError as exc:
            LOGGER.error("cannot create state dir %s: %s", self._paths.logs_dir, exc)

    @property
    def paths(self) -> StatePaths:
        return self._paths

    def _path(self, key: str) -> Path:
        try:
            return self._files[key]
        except KeyError:
            raise KeyError(f"unknown state key: {key!r}") from None

    def get(self, key: str) -> Tuple[str, bool]:
        path = self._path(key)
        if not path.exists():
            return _missing_default(key), True
        try:
            raw = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            LOGGER.error("error reading %s file: %s", key, exc)
            return _error_default(key), False

        if key == LOG_KEY:
            return raw, True

        value = raw.strip()
        if not value:
            return _missing_default(key), True
        if value not in _ALLOWED[key]:
            LOGGER.warning("unexpected %s value %r in %s", key, value, path)
            return _error_default(key), False
        return value, True

    def set(self, key: str, value: str) -> bool:
        path = self._path(key)
        try:
            atomic_write_text(path, value)
        except OSError as exc:
            LOGGER.error("error writing %s file: %s", key, exc)
            return False
        return True

    def append(self, key: str, text: str) -> bool:
        path = self._path(key)
        try:
            with path.open("a", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            LOGGER.error("error appending to %s file: %s", key, exc)
            return False
        return True


def _missing_default(key: str) -> str:
    if key == STATUS_KEY:
        return STATUS_IDLE
    if key == LAST_OUTCOME_KEY:
        return OUTCOME_UNKNOWN
    return ""


def _error_default(key: str) -> str:
    if key == STATUS_KEY:
        return STATUS_UNKNOWN
    if key == LAST_OUTCOME_KEY:
        return OUTCOME_UNKNOWN
    return ""
