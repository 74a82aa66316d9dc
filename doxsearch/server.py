"""FastAPI search service for a sharded API-documentation index."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.deps import get_engine, get_store, resolve_limit
from .config import Settings, settings as default_settings
from .engine.index.store import IndexStore
from .engine.index.transport import ShardFetcher, build_fetcher
from .engine.query_engine import QueryEngine
from .errors import (
    OccurrenceIndexOutOfRange,
    SearchIndexError,
    ShardLoadFailed,
    ShardParseError,
    SymbolNotFound,
)
from .middleware import RequestContextMiddleware
from .models import (
    ErrorResponse,
    HealthResponse,
    NavigationResponse,
    SearchResponse,
    SearchResultItem,
)

logger = logging.getLogger(__name__)

# Longest query text accepted by /v1/search
MAX_QUERY_LENGTH = 256

# HTTP status for each error kind; anything else is a 500
ERROR_STATUS: dict[type[SearchIndexError], int] = {
    OccurrenceIndexOutOfRange: 400,
    SymbolNotFound: 404,
    ShardParseError: 502,
    ShardLoadFailed: 503,
}


def configure_logging(level: str) -> None:
    """Install a basic log format for the service process."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    fetcher: ShardFetcher | None = None,
) -> FastAPI:
    """Build the search application.

    Args:
        settings: Configuration (defaults to the environment-derived settings)
        fetcher: Shard transport (defaults to one built from ``settings``)
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Create the store and engine on startup, release the transport on shutdown."""
        logger.info(f"Starting doxsearch v{__version__}")
        if not settings.debug and settings.cors_origins_list == ["*"]:
            logger.warning(
                "CORS allows all origins ('*'). "
                "Set DOXSEARCH_CORS_ALLOWED_ORIGINS to the documentation site's origin."
            )

        shard_fetcher = fetcher or build_fetcher(settings)
        store = IndexStore(shard_fetcher)
        app.state.settings = settings
        app.state.store = store
        app.state.engine = QueryEngine(store)

        if settings.preload_keys:
            await store.preload(settings.preload_keys)

        yield

        aclose = getattr(shard_fetcher, "aclose", None)
        if fetcher is None and aclose is not None:
            await aclose()
        logger.info("doxsearch stopped")

    app = FastAPI(
        title="doxsearch",
        description="Incremental symbol search for generated API documentation",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"],
    )

    _register_exception_handlers(app)
    _register_routes(app)
    return app


# ============ EXCEPTION HANDLERS ============


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SearchIndexError)
    async def search_error_handler(request: Request, exc: SearchIndexError):
        """Map search errors to HTTP statuses with the standard error body."""
        status_code = next(
            (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500
        )
        if status_code >= 500:
            logger.warning(f"{request.url.path} failed: {exc}")
        body = ErrorResponse(error=str(exc), retryable=isinstance(exc, ShardLoadFailed))
        return JSONResponse(status_code=status_code, content=body.model_dump())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with a sanitized error message."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        body = ErrorResponse(error="An internal server error occurred. Please try again.")
        return JSONResponse(status_code=500, content=body.model_dump())


# ============ ROUTES ============


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(
        store: Annotated[IndexStore, Depends(get_store)],
    ) -> HealthResponse:
        """Liveness check, with the number of cached shards."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            shards_loaded=len(store.loaded_shards()),
        )

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "doxsearch",
            "version": __version__,
            "docs": "/docs",
            "search": "/v1/search?q=",
        }

    @app.get("/v1/search", response_model=SearchResponse, tags=["Search"])
    async def search(
        engine: Annotated[QueryEngine, Depends(get_engine)],
        limit: Annotated[int, Depends(resolve_limit)],
        q: Annotated[
            str, Query(max_length=MAX_QUERY_LENGTH, description="Partial symbol name")
        ] = "",
        seq: Annotated[int | None, Query(description="Caller sequence token, echoed back")] = None,
    ) -> SearchResponse:
        """Incremental symbol search, called once per keystroke."""
        started = time.perf_counter()
        hits = await engine.query(q, limit)
        return SearchResponse(
            query=q,
            seq=seq,
            results=[SearchResultItem.from_hit(hit) for hit in hits],
            total=len(hits),
            latency_ms=round((time.perf_counter() - started) * 1000, 3),
        )

    @app.get("/v1/resolve", response_model=NavigationResponse, tags=["Search"])
    async def resolve(
        engine: Annotated[QueryEngine, Depends(get_engine)],
        key: Annotated[str, Query(min_length=1, max_length=MAX_QUERY_LENGTH)],
        occurrence: Annotated[int, Query(description="Occurrence index")] = 0,
    ) -> NavigationResponse:
        """Navigation target for one occurrence of an exact symbol key."""
        target = await engine.lookup(key, occurrence)
        return NavigationResponse.from_target(key.strip().lower(), occurrence, target)


app = create_app()


# ============ MAIN ============


def main():
    """Run the server with uvicorn."""
    import uvicorn

    configure_logging(default_settings.log_level)
    uvicorn.run(
        "doxsearch.server:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )


if __name__ == "__main__":
    main()
