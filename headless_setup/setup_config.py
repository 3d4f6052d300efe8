from __future__ import annotations

import os
import platform
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.paths import PATHS, expand

DEFAULT_PACKAGES = [
    "keychain",
    "pass",
    "gnupg",
    "pinentry-tty",
    "git",
    "openssh-client",
    "curl",
]

DEFAULT_SSH_KEYS = ["id_ed25519", "id_rsa"]

DEFAULT_MASKED_SERVICES = [
    "gnome-keyring-daemon.service",
    "gnome-keyring-daemon.socket",
]

DEFAULT_RC_FILES = [".bashrc", ".profile"]

GCM_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

GPG_ID_ENV = "HEADLESS_SETUP_GPG_ID"

# Substring that marks an rc file as already hooked.
HOOK_GUARD = "keychain"
HOOK_MARKER = "# added by headless-setup: ssh-agent for headless sessions"

VALIDATED_KEYS = (
    "gpg_id",
    "ssh_keys",
    "packages",
    "masked_services",
    "pass_namespaces",
    "hosts",
    "rc_paths",
)


def default_asset_pattern(machine: Optional[str] = None) -> str:
    arch = GCM_ARCH.get((machine or platform.machine()).lower(), "amd64")
    return rf"^gcm-linux_{arch}\..*\.deb$"


def _str_list(raw: Dict[str, Any], key: str, default: List[str]) -> List[str]:
    value = raw.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list):
        raise ValueError(f"config.{key} must be a list of strings")
    return [str(v).strip() for v in value if str(v).strip()]


@dataclass(frozen=True)
class SetupConfig:
    """Desired state for one headless login environment."""

    raw: Dict[str, Any] = field(default_factory=dict)
    home: Path = field(default_factory=Path.home)
    dry_run: bool = False

    @property
    def gpg_id(self) -> Optional[str]:
        value = self.raw.get("gpg_id")
        if value is not None and not isinstance(value, str):
            # YAML reads unquoted hex-looking ids such as 01234567 as integers.
            raise ValueError("config.gpg_id must be a quoted string")
        value = (value or os.environ.get(GPG_ID_ENV) or "").strip()
        return value or None

    @property
    def ssh_keys(self) -> List[str]:
        return _str_list(self.raw, "ssh_keys", DEFAULT_SSH_KEYS)

    @property
    def packages(self) -> List[str]:
        return _str_list(self.raw, "packages", DEFAULT_PACKAGES)

    @property
    def gcm_repo(self) -> str:
        return str(self.raw.get("gcm_repo") or "git-ecosystem/git-credential-manager")

    @property
    def gcm_asset_pattern(self) -> str:
        return str(self.raw.get("gcm_asset_pattern") or default_asset_pattern())

    @property
    def pinentry_program(self) -> str:
        return str(self.raw.get("pinentry_program") or "/usr/bin/pinentry-tty")

    @property
    def pinentry_directive(self) -> str:
        return f"pinentry-program {self.pinentry_program}"

    @property
    def masked_services(self) -> List[str]:
        return _str_list(self.raw, "masked_services", DEFAULT_MASKED_SERVICES)

    @property
    def credential_store(self) -> str:
        return str(self.raw.get("credential_store") or "gpg")

    @property
    def pass_namespaces(self) -> List[str]:
        return _str_list(self.raw, "pass_namespaces", ["ssh", "git"])

    @property
    def hosts(self) -> List[str]:
        return _str_list(self.raw, "hosts", [])

    @property
    def pass_entries(self) -> List[str]:
        return [f"{ns}/{host}" for ns in self.pass_namespaces for host in self.hosts]

    @property
    def use_sudo(self) -> bool:
        if "use_sudo" in self.raw:
            return bool(self.raw["use_sudo"])
        return os.geteuid() != 0

    @property
    def agent_conf_path(self) -> Path:
        return self.home / PATHS.agent_conf

    @property
    def rc_paths(self) -> List[Path]:
        return [self.home / rel for rel in _str_list(self.raw, "rc_files", DEFAULT_RC_FILES)]

    @property
    def keychain_argv(self) -> List[str]:
        return ["keychain", "--eval", "--quiet", "--nogui", *self.ssh_keys]

    @property
    def hook_line(self) -> str:
        return f'eval "$({" ".join(self.keychain_argv)})"'

    def with_overrides(
        self,
        *,
        gpg_id: Optional[str] = None,
        home: Optional[str] = None,
        dry_run: Optional[bool] = None,
    ) -> "SetupConfig":
        raw = dict(self.raw)
        if gpg_id:
            raw["gpg_id"] = gpg_id
        return replace(
            self,
            raw=raw,
            home=expand(home) if home else self.home,
            dry_run=self.dry_run if dry_run is None else dry_run,
        )

    def with_gpg_id(self, gpg_id: str) -> "SetupConfig":
        return self.with_overrides(gpg_id=gpg_id)

    def validate(self) -> "SetupConfig":
        """Read every typed key once so bad values fail before any step runs."""

        for name in VALIDATED_KEYS:
            getattr(self, name)
        re.compile(self.gcm_asset_pattern)
        return self


def load_setup_config(path: Optional[str] = None) -> SetupConfig:
    """Load the YAML desired-state file.

    An explicit path must exist; the default location is optional.
    """

    explicit = path is not None
    p = expand(path or PATHS.config_default)
    if not p.exists():
        if explicit:
            raise FileNotFoundError(str(p))
        return SetupConfig()

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("setup config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read the setup config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p} must contain a mapping/object")

    home = raw.get("home")
    config = SetupConfig(raw=raw, home=expand(str(home)) if home else Path.home())
    try:
        return config.validate()
    except re.error as e:
        raise ValueError(f"config.gcm_asset_pattern is not a valid regex: {e}") from e
