from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, MutableMapping, Optional, Protocol, Sequence

import httpx

from .results import Report, StepResult
from .setup_config import SetupConfig

logger = logging.getLogger(__name__)


@dataclass
class SetupContext:
    """Everything a step needs; the only inputs it may read."""

    config: SetupConfig
    prompt: Callable[[str], str] = input
    environ: MutableMapping[str, str] = field(default_factory=lambda: os.environ)
    http_client: Optional[httpx.Client] = None
    report: Report = field(default_factory=lambda: Report(strict=True))

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def run(self, ctx: SetupContext) -> StepResult:
        ...


# Steps that later steps depend on; they run even when skipped over by start_at.
ALWAYS_RUN = {"10_resolve_gpg_key"}


@dataclass(frozen=True)
class PipelineResult:
    report: Report
    ran_steps: List[str]
    skipped_steps: List[str]


def run_pipeline(
    *,
    ctx: SetupContext,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    on_result: Optional[Callable[[int, int, StepResult], None]] = None,
) -> PipelineResult:
    """Run steps in order. A step either returns a result or raises SetupError."""

    known = {s.step_id for s in steps}
    for bound in (start_at, stop_after):
        if bound is not None and bound not in known:
            raise ValueError(f"Unknown step id: {bound}")
    if start_at and stop_after:
        order = [s.step_id for s in steps]
        if order.index(stop_after) < order.index(start_at):
            raise ValueError(f"stop_after {stop_after} comes before start_at {start_at}")

    ran: List[str] = []
    skipped: List[str] = []

    started = start_at is None

    for index, step in enumerate(steps, start=1):
        if not started and step.step_id == start_at:
            started = True

        if not started and step.step_id not in ALWAYS_RUN:
            skipped.append(step.step_id)
            continue

        logger.info("Running step %s", step.step_id)
        result = ctx.report.add_step(step.run(ctx))
        logger.info("Step %s: %s %s", step.step_id, result.outcome.value, result.message)
        if on_result is not None:
            on_result(index, len(steps), result)
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    return PipelineResult(report=ctx.report, ran_steps=ran, skipped_steps=skipped)
