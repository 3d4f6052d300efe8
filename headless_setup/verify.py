"""Read-only health check of the headless credential setup.

Every check prints one line and lands in the report. Tool-presence checks
are fatal: a missing tool ends the run at once. Core checks always fail
the verdict. Soft checks (configuration style) only fail it in strict mode,
which is what the installer uses after applying changes.
"""

from __future__ import annotations

import getpass
import logging
import os
import socket
from datetime import datetime
from pathlib import Path
from typing import Callable, MutableMapping, Optional

from .lib import gitconfig, keychain, passstore
from .lib.command import which
from .lib.dotfiles import file_contains, has_line
from .results import CheckResult, Report, Severity, Status
from .setup_config import HOOK_GUARD, SetupConfig

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]


def _whoami() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return f"uid {os.getuid()}"


class _Checker:
    def __init__(self, report: Report, emit: Emit) -> None:
        self.report = report
        self.emit = emit

    def record(
        self,
        name: str,
        ok: bool,
        severity: Severity,
        detail: str,
        *,
        hint: Optional[str] = None,
    ) -> CheckResult:
        result = self.report.add_check(
            CheckResult(
                name=name,
                status=Status.PASS if ok else Status.FAIL,
                severity=severity,
                detail=detail,
                hint=None if ok else hint,
            )
        )
        self.line(result)
        return result

    def info(self, name: str, detail: str) -> CheckResult:
        result = self.report.add_check(CheckResult(name=name, status=Status.INFO, severity=Severity.INFO, detail=detail))
        self.line(result)
        return result

    def line(self, result: CheckResult) -> None:
        text = f"   {result.symbol} {result.detail}"
        if result.hint:
            text += f" ({result.hint})"
        self.emit(text)
        logger.log(logging.INFO if result.passed else logging.WARNING, "%s: %s", result.name, text.strip())

    def tool(self, name: str) -> bool:
        path = which(name)
        if path:
            self.record(f"tool:{name}", True, Severity.FATAL, f"{name} is installed ({path})")
            return True
        self.record(f"tool:{name}", False, Severity.FATAL, f"{name} NOT found")
        self.report.aborted = True
        return False


def run_checks(
    config: SetupConfig,
    *,
    strict: bool = False,
    environ: Optional[MutableMapping[str, str]] = None,
    emit: Emit = print,
) -> Report:
    env = os.environ if environ is None else environ
    report = Report(strict=strict)
    c = _Checker(report, emit)

    emit("=== Sanity Check: Headless ssh-agent + pass + GCM Setup ===")
    emit(f"Running as user: {_whoami()} on {socket.gethostname()}")
    emit(f"Date: {datetime.now().astimezone().isoformat(timespec='seconds')}")
    emit("")

    emit("1. Checking keychain...")
    if not c.tool("keychain"):
        return report

    emit("2. Checking pass (Password Store)...")
    if not c.tool("pass"):
        return report
    initialized = passstore.is_initialized()
    c.record(
        "pass:initialized",
        initialized,
        Severity.CORE,
        "pass is initialized and accessible" if initialized else "pass installed but not initialized",
        hint="run 'pass init <gpg-id>'",
    )

    emit("3. Checking Git Credential Manager...")
    if not c.tool("git-credential-manager"):
        return report
    store = gitconfig.get_global(gitconfig.CREDENTIAL_STORE_KEY)
    wanted = config.credential_store
    c.record(
        "gcm:credential_store",
        store == wanted,
        Severity.CORE,
        f"GCM configured to use '{wanted}' store (headless-friendly)"
        if store == wanted
        else f"GCM installed but not using '{wanted}' store (currently {store or 'unset'})",
        hint=f"run: git config --global {gitconfig.CREDENTIAL_STORE_KEY} {wanted}",
    )

    pinentry = Path(config.pinentry_program).name
    emit(f"4. Checking {pinentry}...")
    conf = config.agent_conf_path
    # Same predicate as ensure_agent_directive.
    pinentry_ok = has_line(conf, config.pinentry_directive)
    c.record(
        "gpg:pinentry",
        pinentry_ok,
        Severity.SOFT,
        f"{pinentry} configured for headless use"
        if pinentry_ok
        else f"{pinentry} not configured ({conf} missing or wrong)",
        hint=f"add '{config.pinentry_directive}' to {conf}",
    )

    emit("5. Testing ssh-agent startup...")
    agent = keychain.acquire_agent(config.keychain_argv, environ=env)
    c.record(
        "ssh:agent",
        agent.valid,
        Severity.CORE,
        f"ssh-agent is running ({keychain.SOCK_VAR}={agent.sock})"
        if agent.valid
        else "ssh-agent failed to start or socket missing",
    )

    emit("6. Currently loaded SSH keys:")
    identities = keychain.loaded_identities(environ=env) if agent.valid else None
    if identities:
        c.info("ssh:identities", f"{len(identities)} key(s) loaded")
        for ident in identities:
            emit(f"     {ident}")
    else:
        c.info("ssh:identities", "No keys loaded yet (normal if not added)")
        emit(f"   To add: ssh-add ~/.ssh/{config.ssh_keys[0] if config.ssh_keys else 'id_ed25519'}")

    emit("7. Checking shell startup files...")
    for rc in config.rc_paths:
        hooked = file_contains(rc, HOOK_GUARD)
        c.record(
            f"hook:{rc.name}",
            hooked,
            Severity.SOFT,
            f"keychain line present in {rc}" if hooked else f"keychain missing from {rc}",
        )

    return report


def print_summary(report: Report, *, emit: Emit = print) -> None:
    emit("")
    emit("=== SUMMARY ===")
    if report.passed:
        emit("✓ OVERALL: Your headless setup looks SANE and READY!")
        if report.warnings:
            emit(f"  {len(report.warnings)} warning(s) above are advisory")
        emit("  Next: Try 'ssh -T git@github.com' and 'git ls-remote https://github.com/some/repo'")
    else:
        emit("✗ Issues detected, review the checks above")
        for failed in report.failures:
            emit(f"  - {failed.detail}")
