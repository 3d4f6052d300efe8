from __future__ import annotations

import logging

from ..errors import PackageInstallError
from ..lib.command import CommandError
from ..lib.pkg import apt_install, apt_update, missing_packages
from ..pipeline import SetupContext
from ..results import StepResult

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "20_install_packages"

    def run(self, ctx: SetupContext) -> StepResult:
        cfg = ctx.config
        missing = missing_packages(cfg.packages)
        if not missing:
            return StepResult.satisfied(self.step_id, "all packages already installed")

        logger.info("Installing missing packages: %s", ", ".join(missing))
        try:
            apt_update(use_sudo=cfg.use_sudo, dry_run=ctx.dry_run)
            apt_install(missing, use_sudo=cfg.use_sudo, dry_run=ctx.dry_run)
        except CommandError as e:
            raise PackageInstallError(f"Package installation failed: {e}") from e
        return StepResult.applied(self.step_id, f"installed {', '.join(missing)}", packages=missing)
