"""Exception types for the symbol search core.

Every failure is scoped to a single shard or a single query; none of these
abort the whole index.
"""


class SearchIndexError(Exception):
    """Base class for all search index errors."""


# ============ SHARD ERRORS ============


class ShardError(SearchIndexError):
    """A failure tied to one shard of the index.

    Attributes:
        shard_key: Key of the shard the failure belongs to
    """

    def __init__(self, shard_key: str, message: str):
        super().__init__(message)
        self.shard_key = shard_key


class ShardNotFound(ShardError):
    """No shard exists for the derived key (a legitimate, empty outcome)."""

    def __init__(self, shard_key: str, message: str | None = None):
        super().__init__(shard_key, message or f"No shard for key {shard_key!r}")


class ShardParseError(ShardError):
    """Fetched shard content is not a well-formed index."""

    def __init__(self, shard_key: str, reason: str):
        super().__init__(shard_key, f"Malformed shard {shard_key!r}: {reason}")
        self.reason = reason


class ShardLoadFailed(ShardError):
    """The transport could not deliver the shard. Callers may retry."""

    retryable = True

    def __init__(self, shard_key: str, reason: str):
        super().__init__(shard_key, f"Failed to load shard {shard_key!r}: {reason}")
        self.reason = reason


# ============ QUERY ERRORS ============


class OccurrenceIndexOutOfRange(SearchIndexError):
    """An occurrence index does not exist in the entry's occurrence list."""

    def __init__(self, symbol_key: str, index: int, count: int):
        super().__init__(
            f"Occurrence {index} out of range for {symbol_key!r} ({count} available)"
        )
        self.symbol_key = symbol_key
        self.index = index
        self.count = count


class SymbolNotFound(SearchIndexError):
    """No entry exists for an exact symbol key."""

    def __init__(self, symbol_key: str):
        super().__init__(f"Symbol not found: {symbol_key!r}")
        self.symbol_key = symbol_key
