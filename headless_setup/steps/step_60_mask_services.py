from __future__ import annotations

from ..lib.services import mask_units
from ..pipeline import SetupContext
from ..results import StepResult


class MaskServicesStep:
    step_id = "60_mask_services"

    def run(self, ctx: SetupContext) -> StepResult:
        masked, already, failed = mask_units(ctx.config.masked_services, dry_run=ctx.dry_run)
        if failed:
            return StepResult.advisory(
                self.step_id,
                f"could not mask {', '.join(failed)}",
                masked=masked,
                failed=failed,
            )
        if masked:
            return StepResult.applied(self.step_id, f"masked {', '.join(masked)}", masked=masked)
        return StepResult.satisfied(self.step_id, "secret-agent services already masked", units=already)
