from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


class ReleaseError(RuntimeError):
    """Release index query or artifact download failed."""


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    url: str
    tag: str


class ReleaseIndex:
    """Latest-release lookup against the GitHub releases API."""

    def __init__(
        self,
        repo: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if "/" not in repo:
            raise ValueError(f"repo must be owner/name, got {repo!r}")
        self._repo = repo
        self._api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ReleaseIndex":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def latest(self) -> Dict[str, Any]:
        url = f"{self._api_url}/repos/{self._repo}/releases/latest"
        try:
            r = self._client.get(url, headers={"Accept": "application/vnd.github+json"})
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ReleaseError(f"release index query failed for {self._repo}: {e}") from e
        if not isinstance(data, dict):
            raise ReleaseError(f"unexpected release payload for {self._repo}")
        return data

    def find_asset(self, pattern: str) -> Optional[ReleaseAsset]:
        release = self.latest()
        tag = str(release.get("tag_name") or "")
        rx = re.compile(pattern)
        assets: List[Dict[str, Any]] = release.get("assets") or []
        for asset in assets:
            name = str(asset.get("name") or "")
            url = asset.get("browser_download_url")
            if url and rx.search(name):
                logger.info("Matched release asset %s (%s)", name, tag)
                return ReleaseAsset(name=name, url=str(url), tag=tag)
        logger.warning("No asset in %s %s matches %s", self._repo, tag, pattern)
        return None

    def download(self, asset: ReleaseAsset, dest_dir: Path) -> Path:
        out = dest_dir / asset.name
        try:
            with self._client.stream("GET", asset.url) as r:
                r.raise_for_status()
                with out.open("wb") as f:
                    for chunk in r.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            raise ReleaseError(f"download failed for {asset.url}: {e}") from e
        logger.info("Downloaded %s -> %s", asset.url, str(out))
        return out
