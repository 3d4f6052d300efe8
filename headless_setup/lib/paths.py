from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    config_default: str = "~/.config/headless-setup/config.yaml"
    log_default: str = "~/.local/state/headless-setup/headless-setup.log"
    agent_conf: str = ".gnupg/gpg-agent.conf"
    gcm_bin: str = "git-credential-manager"


PATHS = Paths()


def expand(path: str) -> Path:
    return Path(path).expanduser()
