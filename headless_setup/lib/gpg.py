from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from .command import run_cmd, which
from .dotfiles import ensure_line

logger = logging.getLogger(__name__)

PINENTRY_KEY = "pinentry-program"


@dataclass(frozen=True)
class SecretKey:
    fingerprint: str
    uid: str


def list_secret_keys() -> List[SecretKey]:
    """Parse `gpg --list-secret-keys --with-colons`.

    Each `sec` record is followed by its `fpr` and `uid` records.
    """

    if not which("gpg"):
        return []
    r = run_cmd(["gpg", "--list-secret-keys", "--with-colons"], check=False)
    if not r.ok:
        return []

    keys: List[SecretKey] = []
    fpr: Optional[str] = None
    uid: Optional[str] = None
    in_sec = False
    for line in r.stdout.splitlines():
        fields = line.split(":")
        kind = fields[0]
        if kind == "sec":
            if in_sec and fpr:
                keys.append(SecretKey(fingerprint=fpr, uid=uid or ""))
            in_sec, fpr, uid = True, None, None
        elif kind == "ssb":
            # Subkey records carry their own fpr; stop collecting for the primary.
            if in_sec and fpr:
                keys.append(SecretKey(fingerprint=fpr, uid=uid or ""))
            in_sec = False
        elif in_sec and kind == "fpr" and fpr is None and len(fields) > 9:
            fpr = fields[9]
        elif in_sec and kind == "uid" and uid is None and len(fields) > 9:
            uid = fields[9]
    if in_sec and fpr:
        keys.append(SecretKey(fingerprint=fpr, uid=uid or ""))
    return keys


def prompt_for_gpg_id(prompt: Callable[[str], str]) -> str:
    keys = list_secret_keys()
    if keys:
        print("Available GPG secret keys:")
        for k in keys:
            print(f"   {k.fingerprint}  {k.uid}")
    else:
        print("No GPG secret keys found (create one with: gpg --full-generate-key)")
    try:
        return prompt("Enter the GPG key ID or email to use for pass: ").strip()
    except EOFError:
        return ""


def current_pinentry(conf_path: Path) -> List[str]:
    if not conf_path.is_file():
        return []
    out: List[str] = []
    for line in conf_path.read_text(encoding="utf-8", errors="replace").splitlines():
        stripped = line.strip()
        if stripped.startswith(PINENTRY_KEY):
            out.append(stripped)
    return out


def ensure_agent_directive(conf_path: Path, directive: str, *, dry_run: bool = False) -> bool:
    """Append a gpg-agent.conf directive if the exact line is missing."""

    others: List[str] = []
    if directive.startswith(PINENTRY_KEY):
        others = [d for d in current_pinentry(conf_path) if d != directive]
    appended = ensure_line(conf_path, directive, dry_run=dry_run, dir_mode=0o700)
    if appended and others:
        # gpg-agent takes the last occurrence of a single-valued option.
        logger.warning("%s had %s; superseded by %s", str(conf_path), ", ".join(others), directive)
    return appended


def reload_agent(*, dry_run: bool = False) -> bool:
    if not which("gpgconf"):
        logger.info("gpgconf not found; gpg-agent picks up the change on next start")
        return False
    r = run_cmd(["gpgconf", "--reload", "gpg-agent"], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("gpg-agent reload failed: %s", r.stderr.strip())
    return r.ok
