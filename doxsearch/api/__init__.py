"""API utilities and dependencies.

This package contains shared API utilities:
- deps: FastAPI dependency injection functions
"""

from .deps import get_engine, get_settings, get_store, resolve_limit

__all__ = [
    "get_engine",
    "get_settings",
    "get_store",
    "resolve_limit",
]
