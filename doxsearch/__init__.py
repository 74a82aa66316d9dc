"""Incremental symbol search over a sharded API-documentation index."""

__version__ = "0.1.0"
