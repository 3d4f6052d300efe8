from __future__ import annotations

import logging
from typing import List, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

PLACEHOLDER = "placeholder: replace with `pass edit`\n"


def is_initialized() -> bool:
    """`pass ls` only succeeds once the store has a .gpg-id."""

    return run_cmd(["pass", "ls"], check=False).ok


def init_store(gpg_id: str, *, dry_run: bool = False) -> None:
    run_cmd(["pass", "init", gpg_id], dry_run=dry_run)


def has_entry(name: str) -> bool:
    return run_cmd(["pass", "show", name], check=False).ok


def ensure_entries(names: Sequence[str], *, dry_run: bool = False) -> tuple[List[str], List[str]]:
    """Pre-create entries that are missing.

    Returns (created, failed). Failures never raise.
    """

    created: List[str] = []
    failed: List[str] = []
    for name in names:
        if has_entry(name):
            continue
        r = run_cmd(
            ["pass", "insert", "--multiline", name],
            check=False,
            input_text=PLACEHOLDER,
            dry_run=dry_run,
        )
        if r.ok:
            created.append(name)
        else:
            logger.warning("Could not create pass entry %s: %s", name, r.stderr.strip())
            failed.append(name)
    return created, failed
