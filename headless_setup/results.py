from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class Outcome(str, enum.Enum):
    APPLIED = "applied"
    SATISFIED = "satisfied"
    ADVISORY = "advisory"


class Severity(str, enum.Enum):
    # Tool missing entirely: abort the check run immediately.
    FATAL = "fatal"
    # Core capability: fails the verdict in every mode.
    CORE = "core"
    # Configuration style: fails the verdict only in strict mode.
    SOFT = "soft"
    # Never affects the verdict.
    INFO = "info"


class Status(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    INFO = "info"

    @property
    def symbol(self) -> str:
        return {"pass": "✓", "fail": "✗", "info": "•"}[self.value]


@dataclass(frozen=True)
class StepResult:
    step_id: str
    outcome: Outcome
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def applied(cls, step_id: str, message: str, **details: Any) -> "StepResult":
        return cls(step_id, Outcome.APPLIED, message, details)

    @classmethod
    def satisfied(cls, step_id: str, message: str, **details: Any) -> "StepResult":
        return cls(step_id, Outcome.SATISFIED, message, details)

    @classmethod
    def advisory(cls, step_id: str, message: str, **details: Any) -> "StepResult":
        return cls(step_id, Outcome.ADVISORY, message, details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step_id,
            "outcome": self.outcome.value,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class CheckResult:
    name: str
    status: Status
    severity: Severity
    detail: str = ""
    hint: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status is not Status.FAIL

    @property
    def symbol(self) -> str:
        # Soft failures are warnings, not errors.
        if self.status is Status.FAIL and self.severity is Severity.SOFT:
            return "⚠"
        return self.status.symbol

    def fails_verdict(self, *, strict: bool) -> bool:
        if self.status is not Status.FAIL:
            return False
        if self.severity in (Severity.FATAL, Severity.CORE):
            return True
        return strict and self.severity is Severity.SOFT

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "check": self.name,
            "status": self.status.value,
            "severity": self.severity.value,
            "detail": self.detail,
        }
        if self.hint:
            out["hint"] = self.hint
        return out


@dataclass
class Report:
    """Aggregate of one installer or verifier run."""

    strict: bool = False
    steps: List[StepResult] = field(default_factory=list)
    checks: List[CheckResult] = field(default_factory=list)
    aborted: bool = False

    def add_step(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    def add_check(self, result: CheckResult) -> CheckResult:
        self.checks.append(result)
        return result

    @property
    def failures(self) -> List[CheckResult]:
        return [c for c in self.checks if c.fails_verdict(strict=self.strict)]

    @property
    def warnings(self) -> List[CheckResult]:
        return [c for c in self.checks if c.status is Status.FAIL and c.severity is Severity.SOFT]

    @property
    def advisories(self) -> List[StepResult]:
        return [s for s in self.steps if s.outcome is Outcome.ADVISORY]

    @property
    def passed(self) -> bool:
        return not self.aborted and not self.failures

    @property
    def changed(self) -> bool:
        return any(s.outcome is Outcome.APPLIED for s in self.steps)

    @property
    def missing_tool(self) -> Optional[str]:
        """Name of the tool whose absence aborted the run, if any."""

        if not self.aborted or not self.checks:
            return None
        last = self.checks[-1]
        if last.severity is Severity.FATAL and last.name.startswith("tool:"):
            return last.name.split(":", 1)[1]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strict": self.strict,
            "passed": self.passed,
            "aborted": self.aborted,
            "steps": [s.to_dict() for s in self.steps],
            "checks": [c.to_dict() for c in self.checks],
        }
