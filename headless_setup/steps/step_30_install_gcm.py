from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ..errors import PackageInstallError, ReleaseLookupError
from ..lib.command import CommandError, which
from ..lib.paths import PATHS
from ..lib.pkg import dpkg_install
from ..lib.release import ReleaseError, ReleaseIndex
from ..pipeline import SetupContext
from ..results import StepResult

logger = logging.getLogger(__name__)


class InstallGcmStep:
    step_id = "30_install_gcm"

    def run(self, ctx: SetupContext) -> StepResult:
        cfg = ctx.config
        existing = which(PATHS.gcm_bin)
        if existing:
            return StepResult.satisfied(self.step_id, f"{PATHS.gcm_bin} already installed ({existing})")

        with ReleaseIndex(cfg.gcm_repo, client=ctx.http_client) as index:
            try:
                asset = index.find_asset(cfg.gcm_asset_pattern)
            except ReleaseError as e:
                raise ReleaseLookupError(str(e)) from e
            if asset is None:
                raise ReleaseLookupError(
                    f"No release artifact of {cfg.gcm_repo} matches {cfg.gcm_asset_pattern}"
                )

            if ctx.dry_run:
                logger.info("Would download and install %s", asset.url)
                return StepResult.applied(self.step_id, f"would install {asset.name}", url=asset.url)

            with tempfile.TemporaryDirectory(prefix="headless-setup-") as tmp:
                try:
                    deb = index.download(asset, Path(tmp))
                except ReleaseError as e:
                    raise ReleaseLookupError(str(e)) from e
                try:
                    dpkg_install(str(deb), use_sudo=cfg.use_sudo)
                except CommandError as e:
                    raise PackageInstallError(f"Installing {asset.name} failed: {e}") from e

        return StepResult.applied(self.step_id, f"installed {asset.name} ({asset.tag})", url=asset.url)
