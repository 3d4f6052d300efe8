from __future__ import annotations

import logging
from typing import Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

CREDENTIAL_STORE_KEY = "credential.credentialStore"
CREDENTIAL_HELPER_KEY = "credential.helper"


def get_global(key: str) -> Optional[str]:
    r = run_cmd(["git", "config", "--global", "--get", key], check=False)
    if not r.ok:
        return None
    return r.stdout.strip() or None


def set_global(key: str, value: str, *, dry_run: bool = False) -> None:
    run_cmd(["git", "config", "--global", key, value], dry_run=dry_run)


def ensure_global(key: str, value: str, *, dry_run: bool = False) -> bool:
    """Set key=value unless it already holds that value. Returns True when written."""

    current = get_global(key)
    if current == value:
        return False
    logger.info("git config %s: %r -> %r", key, current, value)
    set_global(key, value, dry_run=dry_run)
    return True


def configure_gcm(*, dry_run: bool = False) -> None:
    run_cmd(["git-credential-manager", "configure"], dry_run=dry_run)
