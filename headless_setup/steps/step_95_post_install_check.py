from __future__ import annotations

from ..errors import MissingPrerequisiteError, VerificationFailed
from ..pipeline import SetupContext
from ..results import StepResult
from ..verify import print_summary, run_checks


class PostInstallCheckStep:
    step_id = "95_post_install_check"

    def run(self, ctx: SetupContext) -> StepResult:
        if ctx.dry_run:
            return StepResult.advisory(self.step_id, "skipped in dry-run")

        print()
        checks = run_checks(ctx.config, strict=True, environ=ctx.environ)
        print_summary(checks)
        ctx.report.checks.extend(checks.checks)
        ctx.report.aborted = ctx.report.aborted or checks.aborted

        if checks.missing_tool:
            raise MissingPrerequisiteError(checks.missing_tool)
        if not checks.passed:
            failed = ", ".join(c.name for c in checks.failures) or "aborted"
            raise VerificationFailed(f"Post-install verification failed: {failed}", report=checks)
        return StepResult.satisfied(self.step_id, "post-install verification passed")
