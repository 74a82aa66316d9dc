"""Engine core module.

Data structures and pure helpers for the search engine:
- Index records (Occurrence, Entry, Shard, SearchHit)
- Shard routing and generator key encoding
- Query normalisation and match tiers
"""

from .keys import (
    decode_symbol_key,
    encode_symbol_key,
    normalize_symbol_key,
    shard_code,
    shard_filename,
    shard_key_for,
)
from .matching import match_tier, normalize_query
from .records import Entry, NavigationTarget, Occurrence, SearchHit, Shard

__all__ = [
    # Records
    "Entry",
    "NavigationTarget",
    "Occurrence",
    "SearchHit",
    "Shard",
    # Keys
    "decode_symbol_key",
    "encode_symbol_key",
    "normalize_symbol_key",
    "shard_code",
    "shard_filename",
    "shard_key_for",
    # Matching
    "match_tier",
    "normalize_query",
]
