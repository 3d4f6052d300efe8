from __future__ import annotations

from ..errors import StoreInitError
from ..lib import passstore
from ..lib.command import CommandError
from ..pipeline import SetupContext
from ..results import StepResult


class InitPassStep:
    step_id = "50_init_pass"

    def run(self, ctx: SetupContext) -> StepResult:
        if passstore.is_initialized():
            return StepResult.satisfied(self.step_id, "password store already initialized")

        gpg_id = ctx.config.gpg_id
        if not gpg_id:
            raise StoreInitError("Cannot initialize pass without a GPG key")
        try:
            passstore.init_store(gpg_id, dry_run=ctx.dry_run)
        except CommandError as e:
            raise StoreInitError(f"pass init failed: {e}") from e
        return StepResult.applied(self.step_id, f"initialized password store for {gpg_id}")
