"""Shard loading: parsing, transports and the lazy shard cache."""

from .parser import owner_from_label, parse_shard
from .store import IndexStore
from .transport import (
    DirectoryShardFetcher,
    HttpShardFetcher,
    MemoryShardFetcher,
    ShardFetcher,
    build_fetcher,
)

__all__ = [
    "IndexStore",
    "ShardFetcher",
    "DirectoryShardFetcher",
    "HttpShardFetcher",
    "MemoryShardFetcher",
    "build_fetcher",
    "owner_from_label",
    "parse_shard",
]
