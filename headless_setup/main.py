from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, List, MutableMapping, Optional

import httpx

from .errors import SetupError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import SetupContext, run_pipeline
from .report_store import save_report
from .results import Outcome, Report, StepResult
from .setup_config import SetupConfig, load_setup_config
from .steps import (
    ConfigurePinentryStep,
    CredentialStoreStep,
    InitPassStep,
    InstallGcmStep,
    InstallPackagesStep,
    MaskServicesStep,
    PassEntriesStep,
    PostInstallCheckStep,
    ResolveGpgKeyStep,
    ShellHooksStep,
)
from .verify import print_summary, run_checks

logger = logging.getLogger(__name__)

_LABELS = {
    Outcome.APPLIED: "applied",
    Outcome.SATISFIED: "already satisfied",
    Outcome.ADVISORY: "advisory",
}


def build_steps():
    return [
        ResolveGpgKeyStep(),
        InstallPackagesStep(),
        InstallGcmStep(),
        ConfigurePinentryStep(),
        InitPassStep(),
        MaskServicesStep(),
        ShellHooksStep(),
        CredentialStoreStep(),
        PassEntriesStep(),
        PostInstallCheckStep(),
    ]


def _announce(index: int, total: int, result: StepResult) -> None:
    print(f"[{index}/{total}] {result.step_id}: {_LABELS[result.outcome]}: {result.message}")


def run(
    config: SetupConfig,
    *,
    prompt: Optional[Callable[[str], str]] = None,
    environ: Optional[MutableMapping[str, str]] = None,
    http_client: Optional[httpx.Client] = None,
    report: Optional[Report] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> Report:
    """Reconcile the host with the desired state.

    Raises SetupError on the first fatal failure; `report` keeps whatever
    was applied before that.
    """

    ctx = SetupContext(
        config=config,
        prompt=prompt or input,
        environ=os.environ if environ is None else environ,
        http_client=http_client,
        report=report if report is not None else Report(strict=True),
    )

    result = run_pipeline(
        ctx=ctx,
        steps=build_steps(),
        start_at=start_at,
        stop_after=stop_after,
        on_result=_announce,
    )
    if result.skipped_steps:
        logger.info("Skipped steps: %s", ", ".join(result.skipped_steps))
    return result.report


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="Desired-state YAML (default ~/.config/headless-setup/config.yaml)")
    p.add_argument("--home", default=None, help="Home directory whose dotfiles are managed")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the log file")
    p.add_argument("--report", default=None, help="Write a JSON/YAML report of the run to this path")
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug logging on the console")


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="headless-setup",
        description="Configure ssh-agent (keychain), pass and Git Credential Manager for headless logins.",
    )
    _add_common(p)
    p.add_argument("--gpg-id", default=None, help="GPG key for pass (prompted for if absent)")
    p.add_argument("--dry-run", action="store_true", help="Log what would change without changing it")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_configure_pinentry)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    args = p.parse_args(argv)

    step_ids = [s.step_id for s in build_steps()]
    for bound in (args.start_at, args.stop_after):
        if bound is not None and bound not in step_ids:
            p.error(f"unknown step id {bound!r} (choose from {', '.join(step_ids)})")
    if args.start_at and args.stop_after and step_ids.index(args.stop_after) < step_ids.index(args.start_at):
        p.error(f"--stop-after {args.stop_after} comes before --start-at {args.start_at}")

    log_path = configure_logging(log_path=args.log, console_level=logging.DEBUG if args.verbose else logging.WARNING)
    logger.info("headless-setup starting (log=%s)", log_path)

    try:
        config = load_setup_config(args.config).with_overrides(
            gpg_id=args.gpg_id,
            home=args.home,
            dry_run=args.dry_run,
        )
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        print(f"✗ Invalid configuration: {e}")
        return 1

    report = Report(strict=True)
    try:
        run(config, report=report, start_at=args.start_at, stop_after=args.stop_after)
    except SetupError as e:
        logger.error("%s", e)
        print(f"✗ {e}")
        return e.exit_code
    except Exception:
        logger.exception("Installer failed")
        raise
    finally:
        if args.report:
            save_report(args.report, report)

    if report.advisories:
        print(f"Completed with {len(report.advisories)} advisory step(s); see {log_path}")
    elif not report.changed:
        print("Everything already satisfied; nothing changed.")
    return 0


def verify_main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="headless-sanity-check",
        description="Check that the headless ssh-agent + pass + GCM setup is sane.",
    )
    _add_common(p)
    p.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    args = p.parse_args(argv)

    configure_logging(log_path=args.log, console_level=logging.DEBUG if args.verbose else None)

    try:
        config = load_setup_config(args.config).with_overrides(home=args.home)
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        print(f"✗ Invalid configuration: {e}")
        return 1

    report = run_checks(config, strict=args.strict)
    if args.report:
        save_report(args.report, report)

    if report.aborted:
        return 1
    print_summary(report)
    return 0 if report.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
