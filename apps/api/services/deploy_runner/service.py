from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional

from .config import deploy_command, deploy_workdir, forward_params
from .log_buffer import DEFAULT_TAIL_LINES, DeploymentLog
from .runner import build_command, start_process
from .store import LAST_OUTCOME_KEY, STATUS_KEY, StateStore
from .types import (
    OUTCOME_FAILED,
    OUTCOME_SUCCESSFUL,
    STATUS_DEPLOYING,
    STATUS_IDLE,
    DeploymentEvent,
    DeployResult,
    ProcessExited,
    ProcessOutput,
    SpawnFailed,
    StatusView,
)

LOGGER = logging.getLogger(__name__)

SUCCESS_LINE = "Deployment completed successfully.\n"

Launcher = Callable[..., Any]


class DeploymentCoordinator:
    """
    Serializes deployments against a single external process.

    All state transitions go through ``handle`` (process events) or
    ``request_deploy`` (admission), both under one lock, so reader and
    waiter threads of the running process never race with HTTP handlers.

    A status persisted as ``deploying`` by a previous server process is
    honoured on admission and is never reset automatically.
    """

    def __init__(
        self,
        store: StateStore | None = None,
        *,
        command: Optional[List[str]] = None,
        workdir: Optional[Path] = None,
        forward: Optional[bool] = None,
        launcher: Launcher = start_process,
    ) -> None:
        self._store = store or StateStore()
        self._log = DeploymentLog(self._store)
        self._command = list(command) if command is not None else deploy_command()
        self._workdir = workdir if workdir is not None else deploy_workdir()
        self._forward = forward_params() if forward is None else forward
        self._launch = launcher
        self._lock = threading.Lock()
        self._in_flight = False

    @property
    def log(self) -> DeploymentLog:
        return self._log

    def request_deploy(
        self, params: Optional[Mapping[str, Optional[str]]] = None
    ) -> DeployResult:
        with self._lock:
            status, _ok = self._store.get(STATUS_KEY)
            if self._in_flight or status == STATUS_DEPLOYING:
                LOGGER.info("deployment already in progress; request not admitted")
                return DeployResult(
                    started=False,
                    status=STATUS_DEPLOYING,
                    logs=self._log.read(DEFAULT_TAIL_LINES),
                )

            self._in_flight = True
            self._store.set(STATUS_KEY, STATUS_DEPLOYING)
            self._log.clear()

            argv = build_command(self._command, params, forward=self._forward)
            LOGGER.info("starting deployment: %s", " ".join(argv))
            try:
                self._launch(argv=argv, cwd=self._workdir, on_event=self.handle)
            except (OSError, ValueError, subprocess.SubprocessError) as exc:
                self._apply(SpawnFailed(error=str(exc)))

            return DeployResult(started=True, status=STATUS_DEPLOYING)

    def handle(self, event: DeploymentEvent) -> None:
        with self._lock:
            self._apply(event)

    def status(self, *, full: bool = False) -> StatusView:
        with self._lock:
            status, _ok = self._store.get(STATUS_KEY)
            outcome, _ok = self._store.get(LAST_OUTCOME_KEY)
            logs = self._log.read(DEFAULT_TAIL_LINES, full=full)
        return StatusView(status=status, last_outcome=outcome, logs=logs)

    def is_deploying(self) -> bool:
        with self._lock:
            return self._in_flight

    def _apply(self, event: DeploymentEvent) -> None:
        if not self._in_flight:
            LOGGER.warning("ignoring %s received with no deployment running", event)
            return

        if isinstance(event, ProcessOutput):
            tag = event.stream.upper()
            if event.stream == "stderr":
                LOGGER.warning("%s: %s", tag, event.text)
            else:
                LOGGER.info("%s: %s", tag, event.text)
            self._log.append(f"{tag}: {event.text}\n")
            return

        if isinstance(event, ProcessExited):
            LOGGER.info("deployment script exited with code %s", event.code)
            self._log.append(f"Deployment script exited with code {event.code}\n")
            if event.code == 0:
                self._store.set(LAST_OUTCOME_KEY, OUTCOME_SUCCESSFUL)
                self._log.replace(SUCCESS_LINE)
            else:
                self._store.set(LAST_OUTCOME_KEY, OUTCOME_FAILED)
                self._log.truncate(DEFAULT_TAIL_LINES)
            self._finish()
            return

        if isinstance(event, SpawnFailed):
            LOGGER.error("error executing deployment script: %s", event.error)
            self._log.append(f"Error executing script: {event.error}\n")
            self._store.set(LAST_OUTCOME_KEY, OUTCOME_FAILED)
            self._log.truncate(DEFAULT_TAIL_LINES)
            self._finish()
            return

        raise TypeError(f"unsupported deployment event: {event!r}")

    def _finish(self) -> None:
        self._store.set(STATUS_KEY, STATUS_IDLE)
        self._in_flight = False
