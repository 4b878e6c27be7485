from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import List

DEFAULT_DEPLOY_COMMAND = "bash scripts/deploy.sh"


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def deploy_command() -> List[str]:
    raw = (os.getenv("DEPLOY_COMMAND") or "").strip()
    return shlex.split(raw or DEFAULT_DEPLOY_COMMAND)


def deploy_workdir() -> Path:
    raw = (os.getenv("DEPLOY_WORKDIR") or "").strip()
    return Path(raw) if raw else Path.cwd()


def forward_params() -> bool:
    return env_bool("DEPLOY_FORWARD_PARAMS", True)
