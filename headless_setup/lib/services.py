from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .command import run_cmd, which

logger = logging.getLogger(__name__)


def is_masked(unit: str) -> bool:
    r = run_cmd(["systemctl", "--user", "is-enabled", unit], check=False)
    return r.stdout.strip() == "masked"


def mask_units(units: Sequence[str], *, dry_run: bool = False) -> Tuple[List[str], List[str], List[str]]:
    """Mask user units, best-effort.

    Returns (masked, already_masked, failed).
    """

    if not which("systemctl"):
        logger.warning("systemctl not found; cannot mask %s", ", ".join(units))
        return [], [], list(units)

    masked: List[str] = []
    already: List[str] = []
    failed: List[str] = []
    for unit in units:
        if is_masked(unit):
            already.append(unit)
            continue
        r = run_cmd(["systemctl", "--user", "mask", "--now", unit], check=False, dry_run=dry_run)
        if r.ok:
            masked.append(unit)
        else:
            logger.warning("Non-fatal: could not mask %s: %s", unit, r.stderr.strip())
            failed.append(unit)
    return masked, already, failed
