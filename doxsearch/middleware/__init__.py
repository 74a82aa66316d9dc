"""ASGI middleware for the search service."""

from .request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
