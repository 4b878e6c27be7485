from __future__ import annotations

import os
from pathlib import Path

from .types import StatePaths


def state_dir() -> Path:
    raw = (os.getenv("STATE_DIR", "/state") or "/state").strip()
    return Path(raw)


def logs_root(root: Path | None = None) -> Path:
    return (root if root is not None else state_dir()) / "logs"


def state_paths(root: Path | None = None) -> StatePaths:
    logs_dir = logs_root(root)
    return StatePaths(
        logs_dir=logs_dir,
        status_path=logs_dir / "deployment_status.txt",
        last_outcome_path=logs_dir / "last_deployment_status.txt",
        log_path=logs_dir / "deployment_log.txt",
    )
