"""
ASGI middleware for request correlation and access logging.
"""

import logging
import time

from .context import RequestContext, generate_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = b"x-request-id"


def _header_request_id(scope) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == REQUEST_ID_HEADER:
            request_id = value.decode("utf-8", errors="replace").strip()
            return request_id or None
    return None


class CorrelationIdMiddleware:
    """
    Binds an X-Request-ID to every log line emitted while serving a request,
    echoes it on the response, and logs one access line per request.

    Usage:
        from activity_engine.observability.middleware import CorrelationIdMiddleware
        app.add_middleware(CorrelationIdMiddleware)
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _header_request_id(scope) or generate_request_id()
        start = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers_list = list(message.get("headers", []))
                headers_list.append((REQUEST_ID_HEADER, request_id.encode("utf-8")))
                message["headers"] = headers_list
            await send(message)

        with RequestContext(request_id=request_id):
            try:
                await self.app(scope, receive, send_with_request_id)
            finally:
                logger.info(
                    "Request completed",
                    extra={
                        "method": scope.get("method"),
                        "path": scope.get("path"),
                        "status_code": status_code,
                        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    },
                )
