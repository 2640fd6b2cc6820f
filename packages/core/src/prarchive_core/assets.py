"""Run-scoped cache that turns remote asset URLs into local copies."""

from __future__ import annotations

import asyncio
import logging
import posixpath
from collections import defaultdict
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import httpx

if TYPE_CHECKING:
    from prarchive_store.base import BaseStore
    from prarchive_store.models import LocalAsset

logger = logging.getLogger(__name__)


def url_extension(url: str) -> str:
    """Return the extension of the URL's path component, or "" when it has none."""
    return posixpath.splitext(urlparse(url).path)[1]


class AssetStore:
    """Downloads each distinct asset URL at most once per run.

    Successful downloads are written through the sink as ``{n}{ext}`` where
    ``n`` counts the assets stored so far, and the resulting relative path is
    memoised. Failed downloads return the original URL unchanged. By default
    a failure is not remembered, so a later reference to the same URL gets
    one more attempt; pass ``retry_failures=False`` to remember it instead.

    The store is meant to be created once per run and passed to
    :func:`prarchive_core.localizer.localize` for every text field.
    """

    def __init__(
        self,
        sink: BaseStore,
        client: httpx.AsyncClient | None = None,
        *,
        retry_failures: bool = True,
        headers: dict | None = None,
        timeout: float | None = None,
    ):
        self._sink = sink
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(follow_redirects=True, headers=headers, timeout=timeout)
        self._client = client
        self._retry_failures = retry_failures
        self._paths: dict[str, str] = {}
        self._assets: list[LocalAsset] = []
        self._failures: set[str] = set()
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.fetch_count = 0

    async def __aenter__(self) -> AssetStore:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def assets(self) -> list[LocalAsset]:
        return list(self._assets)

    @property
    def failures(self) -> set[str]:
        """URLs that failed at least once and were never stored afterwards."""
        return {url for url in self._failures if url not in self._paths}

    async def resolve(self, url: str) -> str:
        """Return the local relative path for ``url``, or ``url`` itself on failure."""
        cached = self._paths.get(url)
        if cached is not None:
            return cached
        if not self._retry_failures and url in self._failures:
            return url

        # Concurrent first requests for the same URL queue here; whoever
        # enters second sees the mapping the first one recorded.
        async with self._locks[url]:
            cached = self._paths.get(url)
            if cached is not None:
                return cached
            if not self._retry_failures and url in self._failures:
                return url

            try:
                content = await self._fetch(url)
                # The sink write is synchronous: no await between reading the
                # counter and recording the mapping, so concurrent resolutions
                # never share a filename and a failed write leaves no gap.
                filename = f"{len(self._assets)}{url_extension(url)}"
                asset = self._sink.save_asset(filename, content, url=url)
            except Exception as e:
                logger.debug("Could not localise %s (%s): %s", url, type(e).__name__, e)
                self._failures.add(url)
                if not self._retry_failures:
                    self._locks.pop(url, None)
                return url

            self._assets.append(asset)
            self._paths[url] = asset.relative_path
            logger.debug("Stored %s as %s", url, asset.relative_path)

        # Later callers hit the cache above and never reach the lock again.
        self._locks.pop(url, None)
        return asset.relative_path

    async def _fetch(self, url: str) -> bytes:
        self.fetch_count += 1
        response = await self._client.get(url)
        response.raise_for_status()
        return response.content
