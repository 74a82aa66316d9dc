"""Request context middleware.

Tags every HTTP response with a request id and timing, and marks search
responses as uncacheable. Pure ASGI, so streaming responses pass through
untouched.
"""

import logging
import time
from uuid import uuid4

logger = logging.getLogger(__name__)

# Paths whose responses depend on the query string and must not be cached
UNCACHED_PREFIXES = ("/v1/",)


class RequestContextMiddleware:
    """Add X-Request-Id, X-Response-Time and basic hardening headers.

    An incoming X-Request-Id header is reused so the UI can correlate
    its own logs with the server's.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope) or str(uuid4())
        started = time.perf_counter()
        path = scope.get("path", "")

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                elapsed_ms = (time.perf_counter() - started) * 1000
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                headers.append((b"x-response-time", f"{elapsed_ms:.1f}ms".encode()))
                headers.append((b"x-content-type-options", b"nosniff"))
                if path.startswith(UNCACHED_PREFIXES):
                    headers.append((b"cache-control", b"no-store"))
                message = {**message, "headers": headers}
                logger.debug(
                    f"{scope.get('method', '?')} {path} -> {message['status']} "
                    f"({elapsed_ms:.1f}ms, {request_id})"
                )
            await send(message)

        await self.app(scope, receive, send_with_headers)


def _incoming_request_id(scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"x-request-id":
            candidate = value.decode("latin-1").strip()
            # Only short, non-empty ids are reused
            if candidate and len(candidate) <= 128:
                return candidate
    return None
