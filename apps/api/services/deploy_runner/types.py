from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Union

DeploymentStatus = Literal["idle", "deploying", "unknown"]
LastOutcome = Literal["successful", "failed", "unknown"]
StreamName = Literal["stdout", "stderr"]

STATUS_IDLE: DeploymentStatus = "idle"
STATUS_DEPLOYING: DeploymentStatus = "deploying"
STATUS_UNKNOWN: DeploymentStatus = "unknown"

OUTCOME_SUCCESSFUL: LastOutcome = "successful"
OUTCOME_FAILED: LastOutcome = "failed"
OUTCOME_UNKNOWN: LastOutcome = "unknown"


@dataclass(frozen=True)
class StatePaths:
    logs_dir: Path
    status_path: Path
    last_outcome_path: Path
    log_path: Path


@dataclass(frozen=True)
class ProcessOutput:
    stream: StreamName
    text: str


@dataclass(frozen=True)
class ProcessExited:
    code: int


@dataclass(frozen=True)
class SpawnFailed:
    error: str


DeploymentEvent = Union[ProcessOutput, ProcessExited, SpawnFailed]


@dataclass(frozen=True)
class DeployResult:
    """Outcome of an admission attempt."""

    started: bool
    status: DeploymentStatus
    logs: Optional[str] = None


@dataclass(frozen=True)
class StatusView:
    status: DeploymentStatus
    last_outcome: LastOutcome
    logs: str
