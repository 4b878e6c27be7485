from __future__ import annotations

from pathlib import Path


def safe_mkdir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, text: str) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


def split_lines(text: str) -> list[str]:
    """
    Split a log blob on newlines, dropping the single empty entry a
    trailing newline produces.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines
