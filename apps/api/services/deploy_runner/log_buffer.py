from __future__ import annotations

from typing import List

from .store import LOG_KEY, StateStore
from .util import split_lines

DEFAULT_TAIL_LINES = 5


class DeploymentLog:
    """
    Bounded views over the persisted deployment log blob.

    Lines are stored exactly as appended. stdout and stderr are read by
    separate threads, so their relative order in the blob is the order in
    which the reads completed, not the order the process wrote them.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store

    def append(self, text: str) -> None:
        self._store.append(LOG_KEY, text)

    def clear(self) -> None:
        self._store.set(LOG_KEY, "")

    def replace(self, text: str) -> None:
        self._store.set(LOG_KEY, text)

    def lines(self) -> List[str]:
        raw, _ok = self._store.get(LOG_KEY)
        return split_lines(raw)

    def tail(self, max_lines: int = DEFAULT_TAIL_LINES) -> List[str]:
        if max_lines <= 0:
            return []
        return self.lines()[-max_lines:]

    def read(self, max_lines: int = DEFAULT_TAIL_LINES, full: bool = False) -> str:
        if full:
            return "\n".join(self.lines())
        return "\n".join(self.tail(max_lines))

    def truncate(self, keep: int = DEFAULT_TAIL_LINES) -> None:
        kept = self.tail(keep)
        self._store.set(LOG_KEY, "".join(f"{line}\n" for line in kept))
