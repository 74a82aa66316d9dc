"""Incremental ("as you type") symbol search.

The engine keeps no state between calls: every query reads the store's
cached shards and builds a fresh result list. Tracking which query is the
latest one is left to the caller.
"""

import logging

from ..errors import OccurrenceIndexOutOfRange, ShardNotFound, SymbolNotFound
from .core.keys import shard_key_for
from .core.matching import match_tier, normalize_query
from .core.records import Entry, NavigationTarget, SearchHit
from .index.store import IndexStore

logger = logging.getLogger(__name__)


class QueryEngine:
    """Matches user-typed text against a sharded symbol index."""

    def __init__(self, store: IndexStore):
        self.store = store

    async def query(self, text: str, limit: int | None = None) -> list[SearchHit]:
        """Find symbols whose key contains ``text``.

        Results are ranked exact match first, then prefix matches, then other
        substring matches. Within a tier the shard's own order is kept, so
        identical queries always produce identical results.

        Args:
            text: Partial symbol name as typed by the user
            limit: Maximum number of results; None returns all, <= 0 returns none

        Returns:
            Ranked search hits (empty for blank text or a missing shard)

        Raises:
            ShardParseError: The needed shard is malformed
            ShardLoadFailed: The needed shard could not be fetched (retryable)
        """
        needle = normalize_query(text)
        if not needle:
            return []
        if limit is not None and limit <= 0:
            return []

        try:
            shard = await self.store.load(shard_key_for(needle))
        except ShardNotFound:
            logger.debug(f"No shard for query {needle!r}")
            return []

        hits: list[SearchHit] = []
        for entry in shard.entries:
            tier = match_tier(entry.key, needle)
            if tier is not None:
                hits.append(SearchHit(entry=entry, tier=tier))

        # list.sort is stable: equal tiers keep shard order
        hits.sort(key=lambda hit: -hit.tier)
        if limit is not None:
            hits = hits[:limit]
        logger.debug(f"Query {needle!r}: {len(hits)} hits")
        return hits

    def resolve(self, entry: Entry, occurrence_index: int) -> NavigationTarget:
        """Return the page and anchor of one occurrence of ``entry``.

        Raises:
            OccurrenceIndexOutOfRange: If the index is not valid for the entry
        """
        count = len(entry.occurrences)
        if not 0 <= occurrence_index < count:
            raise OccurrenceIndexOutOfRange(entry.key, occurrence_index, count)
        return entry.occurrences[occurrence_index].target

    async def lookup(self, symbol_key: str, occurrence_index: int = 0) -> NavigationTarget:
        """Resolve an exact symbol key straight to a navigation target.

        Raises:
            SymbolNotFound: If no entry has this key
            OccurrenceIndexOutOfRange: If the index is not valid for the entry
        """
        entry = await self.store.get(symbol_key)
        if entry is None:
            raise SymbolNotFound(symbol_key)
        return self.resolve(entry, occurrence_index)
