"""FastAPI dependency injection functions.

The engine and store are created once per application (see the server
lifespan) and stored on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Query, Request

from ..config import Settings
from ..engine.index.store import IndexStore
from ..engine.query_engine import QueryEngine


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> IndexStore:
    return request.app.state.store


def get_engine(request: Request) -> QueryEngine:
    return request.app.state.engine


def resolve_limit(
    settings: Annotated[Settings, Depends(get_settings)],
    limit: Annotated[int | None, Query(description="Maximum results")] = None,
) -> int:
    """Apply the configured default and ceiling to a requested limit.

    A limit of zero or less is passed through so the engine returns nothing.
    """
    if limit is None:
        return settings.default_limit
    return min(limit, settings.max_limit)
