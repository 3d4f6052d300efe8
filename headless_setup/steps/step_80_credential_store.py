from __future__ import annotations

import logging

from ..lib import gitconfig
from ..lib.command import CommandError
from ..pipeline import SetupContext
from ..results import StepResult

logger = logging.getLogger(__name__)


class CredentialStoreStep:
    step_id = "80_credential_store"

    def run(self, ctx: SetupContext) -> StepResult:
        store = ctx.config.credential_store
        changes = []
        if gitconfig.ensure_global(gitconfig.CREDENTIAL_STORE_KEY, store, dry_run=ctx.dry_run):
            changes.append(f"{gitconfig.CREDENTIAL_STORE_KEY}={store}")

        # Without a helper git never calls GCM at all.
        if gitconfig.get_global(gitconfig.CREDENTIAL_HELPER_KEY) is None:
            try:
                gitconfig.configure_gcm(dry_run=ctx.dry_run)
            except CommandError as e:
                logger.warning("git-credential-manager configure failed: %s", e)
                return StepResult.advisory(
                    self.step_id,
                    "credential.helper not set; run 'git-credential-manager configure'",
                    changes=changes,
                )
            changes.append("credential.helper via git-credential-manager configure")

        if not changes:
            return StepResult.satisfied(self.step_id, f"{gitconfig.CREDENTIAL_STORE_KEY} already {store}")
        return StepResult.applied(self.step_id, "; ".join(changes), changes=changes)
