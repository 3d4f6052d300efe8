from __future__ import annotations

from ..lib.dotfiles import ensure_line
from ..pipeline import SetupContext
from ..results import StepResult
from ..setup_config import HOOK_GUARD, HOOK_MARKER


class ShellHooksStep:
    step_id = "70_shell_hooks"

    def run(self, ctx: SetupContext) -> StepResult:
        cfg = ctx.config
        hooked = []
        for rc in cfg.rc_paths:
            # Guarded by substring so a hand-written keychain line also counts.
            if ensure_line(rc, cfg.hook_line, guard=HOOK_GUARD, preamble=["", HOOK_MARKER], dry_run=ctx.dry_run):
                hooked.append(str(rc))

        if not hooked:
            return StepResult.satisfied(self.step_id, "startup hook already present in all rc files")
        return StepResult.applied(self.step_id, f"added keychain hook to {', '.join(hooked)}", files=hooked)
