from __future__ import annotations

import logging
from typing import List, Sequence

from .command import privileged, run_cmd

logger = logging.getLogger(__name__)


def dpkg_is_installed(package: str) -> bool:
    r = run_cmd(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.ok and "install ok installed" in r.stdout


def missing_packages(packages: Sequence[str]) -> List[str]:
    return [p for p in packages if not dpkg_is_installed(p)]


def apt_update(*, use_sudo: bool, dry_run: bool = False) -> None:
    run_cmd(privileged(["apt-get", "update"], use_sudo=use_sudo), dry_run=dry_run)


def apt_install(
    packages: Sequence[str],
    *,
    use_sudo: bool,
    with_recommends: bool = False,
    dry_run: bool = False,
) -> None:
    if not packages:
        return
    argv = [
        "apt-get",
        "install",
        "-y",
    ]
    if not with_recommends:
        argv.append("--no-install-recommends")
    run_cmd(
        privileged([*argv, *packages], use_sudo=use_sudo),
        env={"DEBIAN_FRONTEND": "noninteractive"},
        dry_run=dry_run,
    )


def dpkg_install(deb_path: str, *, use_sudo: bool, dry_run: bool = False) -> None:
    run_cmd(privileged(["dpkg", "-i", deb_path], use_sudo=use_sudo), dry_run=dry_run)
