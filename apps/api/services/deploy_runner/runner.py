from __future__ import annotations

import codecs
import os
import subprocess
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .types import DeploymentEvent, ProcessExited, ProcessOutput, StreamName

EventSink = Callable[[DeploymentEvent], None]

# Request field -> flag understood by the deployment script.
PARAM_FLAGS: Dict[str, str] = {
    "container_name": "--container-name",
    "image_name": "--image-name",
    "s3_bucket": "--s3-bucket",
    "domain_name": "--domain-name",
}


def build_command(
    base: Iterable[str],
    params: Optional[Mapping[str, Optional[str]]] = None,
    *,
    forward: bool = True,
) -> List[str]:
    cmd = list(base)
    if not forward or not params:
        return cmd
    for field, flag in PARAM_FLAGS.items():
        value = params.get(field)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            cmd.extend([flag, value])
    return cmd


def runner_env() -> Dict[str, str]:
    env = dict(os.environ)
    env.setdefault("PYTHONUNBUFFERED", "1")
    return env


def _split_stream_buffer(buffer: str) -> tuple[list[str], str]:
    lines: list[str] = []
    while True:
        idx_n = buffer.find("\n")
        idx_r = buffer.find("\r")

        if idx_n == -1 and idx_r == -1:
            break

        if idx_n == -1:
            idx = idx_r
        elif idx_r == -1:
            idx = idx_n
        else:
            idx = idx_n if idx_n < idx_r else idx_r

        width = 1
        if buffer[idx] == "\r":
            if idx == len(buffer) - 1:
                # Could be the first half of CRLF; wait for the next chunk.
                break
            if buffer[idx + 1] == "\n":
                width = 2

        lines.append(buffer[:idx])
        buffer = buffer[idx + width :]

    return lines, buffer


def _pump(stream, name: StreamName, on_event: EventSink) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buf = ""
    try:
        while True:
            chunk = os.read(stream.fileno(), 4096)
            if not chunk:
                break
            buf += decoder.decode(chunk)
            lines, buf = _split_stream_buffer(buf)
            for line in lines:
                on_event(ProcessOutput(stream=name, text=line))
        buf += decoder.decode(b"", final=True)
        lines, buf = _split_stream_buffer(buf)
        for line in lines:
            on_event(ProcessOutput(stream=name, text=line))
        if buf.endswith("\r"):
            buf = buf[:-1]
        if buf:
            on_event(ProcessOutput(stream=name, text=buf))
    finally:
        stream.close()


def start_process(
    *,
    argv: List[str],
    cwd: Path,
    on_event: EventSink,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.Popen:
    """
    Start the deployment process and deliver its output and exit code as
    events from background threads.

    Raises OSError when the process cannot be started at all and
    ValueError when argv cannot be passed to it (e.g. embedded NUL bytes).
    """
    proc = subprocess.Popen(
        argv,
        cwd=str(cwd),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=False,
        bufsize=0,
        env=env if env is not None else runner_env(),
    )

    readers = [
        threading.Thread(
            target=_pump, args=(proc.stdout, "stdout", on_event), daemon=True
        ),
        threading.Thread(
            target=_pump, args=(proc.stderr, "stderr", on_event), daemon=True
        ),
    ]
    for reader in readers:
        reader.start()

    def _wait() -> None:
        rc = proc.wait()
        # Exit is only reported once both streams are drained.
        for reader in readers:
            reader.join()
        on_event(ProcessExited(code=int(rc)))

    threading.Thread(target=_wait, daemon=True).start()
    return proc
