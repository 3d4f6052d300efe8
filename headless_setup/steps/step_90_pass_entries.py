from __future__ import annotations

from ..lib import passstore
from ..pipeline import SetupContext
from ..results import StepResult


class PassEntriesStep:
    step_id = "90_pass_entries"

    def run(self, ctx: SetupContext) -> StepResult:
        names = ctx.config.pass_entries
        if not names:
            return StepResult.satisfied(self.step_id, "no pass entries requested")

        created, failed = passstore.ensure_entries(names, dry_run=ctx.dry_run)
        if failed:
            return StepResult.advisory(
                self.step_id,
                f"could not create {', '.join(failed)}",
                created=created,
                failed=failed,
            )
        if created:
            return StepResult.applied(self.step_id, f"created {', '.join(created)}", created=created)
        return StepResult.satisfied(self.step_id, "pass entries already present")
