from __future__ import annotations

import os
import shutil
import socket
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from headless_setup.lib import command
from headless_setup.setup_config import SetupConfig

# Executables each package puts on PATH.
PACKAGE_BINARIES = {
    "keychain": ["keychain"],
    "pass": ["pass"],
    "gnupg": ["gpg"],
    "pinentry-tty": ["pinentry-tty"],
    "git": ["git"],
    "openssh-client": ["ssh-add"],
    "curl": ["curl"],
}

SYSTEM_BINARIES = ["dpkg-query", "dpkg", "apt-get", "systemctl", "gpgconf"]

GPG_KEYS = (
    "sec:u:255:22:AAAABBBBCCCCDDDD:1700000000:::u:::scESC:::+:::ed25519:::0:\n"
    "fpr:::::::::0123456789ABCDEF0123456789ABCDEF01234567:\n"
    "uid:u::::1700000000::HASH::Dev User <dev@example.com>::::::::::0:\n"
    "ssb:u:255:18:EEEEFFFF00001111:1700000000::::::e:::+:::cv25519::\n"
    "fpr:::::::::FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF:\n"
)


class FakeHost:
    """In-memory stand-in for the tools the setup drives.

    Executables are real files on a private PATH so `which` behaves; every
    command is answered by `spawn` instead of a real process.
    """

    def __init__(self, root: Path) -> None:
        self.bin = root / "bin"
        self.bin.mkdir()
        self.home = root / "home"
        self.home.mkdir()

        self.installed: Set[str] = set()
        self.pass_gpg_id: Optional[str] = None
        self.pass_entries: Dict[str, str] = {}
        self.pass_insert_fails = False
        self.git_config: Dict[str, str] = {}
        self.masked: Set[str] = set()
        self.mask_fails = False
        self.apt_fails = False
        self.agent_works = True
        self.identities: List[str] = []
        # argv prefix that raises KeyboardInterrupt, as if the user hit Ctrl-C there.
        self.interrupt_on: Optional[List[str]] = None
        self.calls: List[List[str]] = []

        self._sock_dir = tempfile.mkdtemp(prefix="hs-")
        self.sock_path = os.path.join(self._sock_dir, "agent.sock")
        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._sock.bind(self.sock_path)

        for name in SYSTEM_BINARIES:
            self.add_binary(name)

    def close(self) -> None:
        self._sock.close()
        shutil.rmtree(self._sock_dir, ignore_errors=True)

    # -- setup helpers -------------------------------------------------------

    def add_binary(self, name: str) -> None:
        p = self.bin / name
        p.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        p.chmod(0o755)

    def remove_binary(self, name: str) -> None:
        (self.bin / name).unlink(missing_ok=True)

    def install(self, *packages: str) -> None:
        for pkg in packages:
            self.installed.add(pkg)
            for name in PACKAGE_BINARIES.get(pkg, []):
                self.add_binary(name)

    def provision(self) -> None:
        """Everything a previous successful run would leave behind, minus dotfiles."""

        self.install(*PACKAGE_BINARIES)
        self.add_binary("git-credential-manager")

    def config(self, **raw) -> SetupConfig:
        raw.setdefault("use_sudo", False)
        return SetupConfig(raw=raw, home=self.home)

    def ran(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    # -- process emulation ---------------------------------------------------

    def spawn(self, argv, *, input_text=None, cwd=None, env=None):
        self.calls.append(list(argv))
        if not (self.bin / argv[0]).exists():
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        if self.interrupt_on and list(argv)[: len(self.interrupt_on)] == self.interrupt_on:
            raise KeyboardInterrupt
        rc, out, err = self._answer(list(argv), input_text, env or {})
        return subprocess.CompletedProcess(argv, rc, out, err)

    def _answer(self, argv: List[str], input_text: Optional[str], env):
        tool, args = argv[0], argv[1:]

        if tool == "dpkg-query":
            pkg = args[-1]
            if pkg in self.installed:
                return 0, "install ok installed", ""
            return 1, "", f"dpkg-query: no packages found matching {pkg}\n"

        if tool == "apt-get":
            if self.apt_fails:
                return 100, "", "E: Unable to locate package\n"
            if args[0] == "install":
                self.install(*[a for a in args[1:] if not a.startswith("-")])
            return 0, "", ""

        if tool == "dpkg" and args[0] == "-i":
            self.add_binary("git-credential-manager")
            return 0, "", ""

        if tool == "pass":
            return self._pass(args, input_text)

        if tool == "git":
            return self._git(args)

        if tool == "git-credential-manager" and args == ["configure"]:
            self.git_config["credential.helper"] = str(self.bin / "git-credential-manager")
            return 0, "Configuring component 'Git Credential Manager'...\n", ""

        if tool == "systemctl":
            unit = args[-1]
            if "is-enabled" in args:
                if unit in self.masked:
                    return 1, "masked\n", ""
                return 0, "enabled\n", ""
            if "mask" in args:
                if self.mask_fails:
                    return 1, "", "Failed to connect to bus\n"
                self.masked.add(unit)
                return 0, "", ""

        if tool == "keychain":
            if not self.agent_works:
                return 1, "", "keychain: ssh-agent failed\n"
            return (
                0,
                f"SSH_AUTH_SOCK={self.sock_path}; export SSH_AUTH_SOCK;\n"
                "SSH_AGENT_PID=4242; export SSH_AGENT_PID;\n",
                "",
            )

        if tool == "ssh-add":
            if env.get("SSH_AUTH_SOCK") != self.sock_path:
                return 2, "", "Could not open a connection to your authentication agent.\n"
            if not self.identities:
                return 1, "The agent has no identities.\n", ""
            return 0, "".join(f"{i}\n" for i in self.identities), ""

        if tool == "gpg":
            return 0, GPG_KEYS, ""

        if tool == "gpgconf":
            return 0, "", ""

        return 0, "", ""

    def _pass(self, args: List[str], input_text: Optional[str]):
        if args[0] == "ls":
            if self.pass_gpg_id is None:
                return 1, "", "Error: password store is empty. Try \"pass init\".\n"
            return 0, "Password Store\n", ""
        if args[0] == "init":
            self.pass_gpg_id = args[1]
            return 0, f"Password store initialized for {args[1]}\n", ""
        if args[0] == "show":
            if args[1] in self.pass_entries:
                return 0, self.pass_entries[args[1]], ""
            return 1, "", f"Error: {args[1]} is not in the password store.\n"
        if args[0] == "insert":
            if self.pass_insert_fails or self.pass_gpg_id is None:
                return 1, "", "gpg: encryption failed\n"
            self.pass_entries[args[-1]] = input_text or ""
            return 0, "", ""
        return 1, "", "unsupported\n"

    def _git(self, args: List[str]):
        assert args[:2] == ["config", "--global"], args
        rest = args[2:]
        if rest[0] == "--get":
            value = self.git_config.get(rest[1])
            if value is None:
                return 1, "", ""
            return 0, value + "\n", ""
        self.git_config[rest[0]] = rest[1]
        return 0, "", ""


@pytest.fixture
def host(tmp_path, monkeypatch):
    h = FakeHost(tmp_path)
    monkeypatch.setenv("PATH", str(h.bin))
    # setenv first so teardown also drops values the code under test exports.
    for name in ("SSH_AUTH_SOCK", "SSH_AGENT_PID", "HEADLESS_SETUP_GPG_ID"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr(command, "_spawn", h.spawn)
    yield h
    h.close()


@pytest.fixture
def environ():
    return {}
