from __future__ import annotations

from ..lib.gpg import ensure_agent_directive, reload_agent
from ..pipeline import SetupContext
from ..results import StepResult


class ConfigurePinentryStep:
    step_id = "40_configure_pinentry"

    def run(self, ctx: SetupContext) -> StepResult:
        cfg = ctx.config
        conf = cfg.agent_conf_path
        if not ensure_agent_directive(conf, cfg.pinentry_directive, dry_run=ctx.dry_run):
            return StepResult.satisfied(self.step_id, f"{conf} already has {cfg.pinentry_directive}")

        reloaded = reload_agent(dry_run=ctx.dry_run)
        return StepResult.applied(
            self.step_id,
            f"added '{cfg.pinentry_directive}' to {conf}",
            agent_reloaded=reloaded,
        )
