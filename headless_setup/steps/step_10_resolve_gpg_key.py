from __future__ import annotations

import logging

from ..errors import UnresolvedInputError
from ..lib.gpg import prompt_for_gpg_id
from ..pipeline import SetupContext
from ..results import StepResult

logger = logging.getLogger(__name__)


class ResolveGpgKeyStep:
    step_id = "10_resolve_gpg_key"

    def run(self, ctx: SetupContext) -> StepResult:
        gpg_id = ctx.config.gpg_id
        source = "config"
        if not gpg_id:
            gpg_id = prompt_for_gpg_id(ctx.prompt)
            source = "prompt"
        if not gpg_id:
            raise UnresolvedInputError("No GPG key provided; pass needs one to initialize the store")

        ctx.config = ctx.config.with_gpg_id(gpg_id)
        logger.info("Using GPG key %s (from %s)", gpg_id, source)
        return StepResult.satisfied(self.step_id, f"GPG key {gpg_id}", source=source)
