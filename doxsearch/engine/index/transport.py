"""Shard transports.

The store depends only on the :class:`ShardFetcher` protocol. Three
implementations are provided: a local directory, an HTTP static-asset
host and an in-memory mapping (bundled resources and tests).

Transports translate their own failures into the search error kinds:
a missing shard becomes ``ShardNotFound`` and anything else that stops
delivery becomes ``ShardLoadFailed``. They never retry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from ...errors import ShardLoadFailed, ShardNotFound
from ...models.enums import ShardNaming
from ..core.keys import shard_filename

if TYPE_CHECKING:
    from ...config import Settings

logger = logging.getLogger(__name__)

# Status codes that mean "this shard does not exist"
NOT_FOUND_STATUSES = frozenset({404, 410})


@runtime_checkable
class ShardFetcher(Protocol):
    """Delivers the raw bytes of one shard."""

    async def fetch_shard(self, shard_key: str) -> bytes: ...


# ============ FILESYSTEM ============


class DirectoryShardFetcher:
    """Reads shards from a local directory (e.g. a built site's ``search/``)."""

    def __init__(
        self,
        root: Path | str,
        category: str = "all",
        naming: ShardNaming = ShardNaming.GENERATOR,
    ):
        self.root = Path(root)
        self.category = category
        self.naming = naming

    def path_for(self, shard_key: str) -> Path:
        return self.root / shard_filename(shard_key, self.category, self.naming)

    async def fetch_shard(self, shard_key: str) -> bytes:
        path = self.path_for(shard_key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise ShardNotFound(shard_key, f"No shard file {path.name}") from e
        except OSError as e:
            raise ShardLoadFailed(shard_key, f"{type(e).__name__}: {e}") from e


# ============ HTTP ============


class HttpShardFetcher:
    """Fetches shards from the static-asset host serving the documentation.

    The fetcher owns its ``httpx.AsyncClient`` unless one is injected, in
    which case closing it is left to the caller.
    """

    def __init__(
        self,
        base_url: str,
        category: str = "all",
        naming: ShardNaming = ShardNaming.GENERATOR,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.category = category
        self.naming = naming
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def url_for(self, shard_key: str) -> str:
        return self.base_url + shard_filename(shard_key, self.category, self.naming)

    async def fetch_shard(self, shard_key: str) -> bytes:
        url = self.url_for(shard_key)
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise ShardLoadFailed(shard_key, f"timed out fetching {url}") from e
        except httpx.HTTPError as e:
            raise ShardLoadFailed(shard_key, f"{type(e).__name__} fetching {url}") from e

        if response.status_code in NOT_FOUND_STATUSES:
            raise ShardNotFound(shard_key, f"{url} returned {response.status_code}")
        if not response.is_success:
            raise ShardLoadFailed(shard_key, f"{url} returned {response.status_code}")
        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpShardFetcher:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


# ============ IN-MEMORY ============


class MemoryShardFetcher:
    """Serves shards from a mapping of shard key to content."""

    def __init__(self, shards: Mapping[str, bytes | str]):
        self._shards = {
            key: value.encode("utf-8") if isinstance(value, str) else value
            for key, value in shards.items()
        }

    async def fetch_shard(self, shard_key: str) -> bytes:
        try:
            return self._shards[shard_key]
        except KeyError:
            raise ShardNotFound(shard_key) from None


# ============ FACTORY ============


def build_fetcher(settings: Settings) -> ShardFetcher:
    """Create the transport described by the configuration.

    ``index_url`` takes precedence over ``index_path``.
    """
    if settings.index_url:
        logger.info(f"Serving index from {settings.index_url} ({settings.index_category})")
        return HttpShardFetcher(
            settings.index_url,
            category=settings.index_category,
            naming=settings.shard_naming,
            timeout=settings.http_timeout,
        )
    logger.info(f"Serving index from {settings.index_path} ({settings.index_category})")
    return DirectoryShardFetcher(
        settings.index_path,
        category=settings.index_category,
        naming=settings.shard_naming,
    )
