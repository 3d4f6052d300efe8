from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def file_contains(path: Path, needle: str) -> bool:
    """grep -q equivalent: False when the file is missing."""

    if not path.is_file():
        return False
    return needle in path.read_text(encoding="utf-8", errors="replace")


def has_line(path: Path, line: str) -> bool:
    if not path.is_file():
        return False
    wanted = line.strip()
    return any(l.strip() == wanted for l in path.read_text(encoding="utf-8", errors="replace").splitlines())


def count_matching_lines(path: Path, needle: str) -> int:
    if not path.is_file():
        return 0
    return sum(1 for l in path.read_text(encoding="utf-8", errors="replace").splitlines() if needle in l)


def append_lines(path: Path, lines: Iterable[str], *, dry_run: bool = False, dir_mode: int = 0o755) -> None:
    """Append lines to a file, creating it (and its parent) if needed.

    Keeps the file newline-terminated so appended lines never join an
    existing last line.
    """

    block = "".join(f"{l}\n" for l in lines)
    if dry_run:
        logger.info("Would append to %s: %s", str(path), block.strip())
        return

    path.parent.mkdir(mode=dir_mode, parents=True, exist_ok=True)
    prefix = ""
    if path.is_file():
        existing = path.read_bytes()
        if existing and not existing.endswith(b"\n"):
            prefix = "\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(prefix + block)
    logger.info("Appended to %s: %s", str(path), block.strip())


def ensure_line(
    path: Path,
    line: str,
    *,
    guard: str | None = None,
    preamble: Iterable[str] = (),
    dry_run: bool = False,
    dir_mode: int = 0o755,
) -> bool:
    """Append `line` unless the file already matches.

    With `guard`, the file matches when it contains that substring anywhere;
    otherwise it must contain `line` exactly. Returns True when appended.
    """

    present = file_contains(path, guard) if guard is not None else has_line(path, line)
    if present:
        logger.info("%s already configured", str(path))
        return False
    append_lines(path, [*preamble, line], dry_run=dry_run, dir_mode=dir_mode)
    return True
