"""Symbol search engine: index records, shard loading and querying."""

from .core import Entry, NavigationTarget, Occurrence, SearchHit, Shard
from .index import IndexStore, build_fetcher
from .query_engine import QueryEngine

__all__ = [
    "Entry",
    "IndexStore",
    "NavigationTarget",
    "Occurrence",
    "QueryEngine",
    "SearchHit",
    "Shard",
    "build_fetcher",
]
