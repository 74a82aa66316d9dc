"""Lazy, single-flight shard cache.

An :class:`IndexStore` starts empty and loads each shard the first time it
is needed. Loaded shards are kept for the life of the store. Concurrent
requests for a shard that is still loading share the same fetch.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable

from ...errors import ShardError, ShardLoadFailed, ShardNotFound, ShardParseError
from ..core.keys import normalize_symbol_key, shard_key_for
from ..core.records import Entry, Shard
from .parser import parse_shard
from .transport import ShardFetcher

logger = logging.getLogger(__name__)

ShardParser = Callable[[str, bytes], Shard]


class IndexStore:
    """Key-addressed access to a sharded symbol index.

    Failure policy:
        - ``ShardNotFound`` and ``ShardParseError`` are remembered, since the
          published index is static and fetching again cannot change them.
          :meth:`forget` clears a remembered failure.
        - ``ShardLoadFailed`` is never remembered; the next call fetches again.
    """

    def __init__(self, fetcher: ShardFetcher, parser: ShardParser = parse_shard):
        """Create an empty store.

        Args:
            fetcher: Transport that delivers raw shard bytes.
            parser: Turns raw bytes into a Shard (defaults to parse_shard).
        """
        self.fetcher = fetcher
        self._parse = parser
        self._shards: dict[str, Shard] = {}
        self._failures: dict[str, ShardError] = {}
        self._inflight: dict[str, asyncio.Task[Shard]] = {}
        # Guards the three tables above
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    # ============ LOADING ============

    async def load(self, shard_key: str) -> Shard:
        """Return the shard for ``shard_key``, fetching it on first use.

        Raises:
            ShardNotFound: No shard exists for the key
            ShardParseError: The shard content is malformed
            ShardLoadFailed: The transport failed (retryable)
        """
        key = shard_key_for(shard_key)

        shard = self._shards.get(key)
        if shard is not None:
            return shard

        async with self._lock:
            shard = self._shards.get(key)
            if shard is not None:
                return shard
            failure = self._failures.get(key)
            if failure is not None:
                raise failure.with_traceback(None)
            task = self._inflight.get(key)
            if task is None:
                task = asyncio.create_task(self._fetch(key), name=f"load-shard-{key}")
                self._inflight[key] = task
            else:
                logger.debug(f"Joining in-flight load of shard {key!r}")

        # Shielded so a cancelled caller does not cancel the load other callers share
        return await asyncio.shield(task)

    async def _fetch(self, key: str) -> Shard:
        self.fetch_count += 1
        try:
            raw = await self.fetcher.fetch_shard(key)
            shard = self._parse(key, raw)
        except (ShardNotFound, ShardParseError) as e:
            self._failures[key] = e
            logger.warning(f"Shard {key!r} unavailable: {e}")
            raise
        except ShardLoadFailed as e:
            logger.warning(f"Shard {key!r} failed to load (retryable): {e}")
            raise
        except Exception as e:
            logger.warning(f"Shard {key!r} failed to load (retryable): {e}")
            raise ShardLoadFailed(key, f"{type(e).__name__}: {e}") from e
        finally:
            self._inflight.pop(key, None)

        self._shards[key] = shard
        logger.info(f"Loaded shard {key!r} ({len(shard)} entries)")
        return shard

    async def preload(self, shard_keys: Iterable[str]) -> dict[str, str | None]:
        """Load several shards concurrently.

        Per-shard failures are logged and reported, never raised.

        Returns:
            Mapping of shard key to None (loaded) or the failure message
        """
        keys = list(dict.fromkeys(shard_key_for(k) for k in shard_keys if k.strip()))
        results = await asyncio.gather(*(self.load(k) for k in keys), return_exceptions=True)

        report: dict[str, str | None] = {}
        for key, result in zip(keys, results):
            if isinstance(result, ShardError):
                report[key] = str(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                report[key] = None
        logger.info(
            f"Preloaded {sum(v is None for v in report.values())}/{len(report)} shards"
        )
        return report

    # ============ LOOKUP ============

    async def get(self, symbol_key: str) -> Entry | None:
        """Exact, case-insensitive lookup of a symbol key.

        Loads the owning shard on first access. A missing shard means the
        symbol is not found.
        """
        key = normalize_symbol_key(symbol_key)
        if not key:
            return None
        try:
            shard = await self.load(key)
        except ShardNotFound:
            return None
        return shard.get(key)

    # ============ INTROSPECTION ============

    def is_loaded(self, shard_key: str) -> bool:
        return shard_key_for(shard_key) in self._shards

    def loaded_shards(self) -> list[str]:
        return sorted(self._shards)

    def forget(self, shard_key: str) -> bool:
        """Clear a remembered failure so the shard is fetched again."""
        return self._failures.pop(shard_key_for(shard_key), None) is not None

    def stats(self) -> dict:
        return {
            "shards_loaded": len(self._shards),
            "entries": sum(len(s) for s in self._shards.values()),
            "failed_shards": sorted(self._failures),
            "inflight": len(self._inflight),
            "fetch_count": self.fetch_count,
        }
