# backend/mentorship/middleware/request_context.py
"""
Pure ASGI request middleware.

Propagates (or mints) the X-Request-ID header into the logging context,
times the request, logs slow requests and records the HTTP Prometheus
series. Implemented without BaseHTTPMiddleware so exceptions and
streaming bodies pass through untouched.
"""

import logging
import re
import time
from typing import Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send
import ulid

from ..core.config import settings
from ..core.request_context import reset_request_id, set_request_id
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128
_ID_SEGMENT = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")
_SKIP_PATHS = {"/health", "/metrics"}


def normalize_endpoint(path: str) -> str:
    """Collapse ULID path segments so the endpoint label stays low-cardinality."""
    return "/".join(":id" if _ID_SEGMENT.match(segment) else segment for segment in path.split("/"))


def _incoming_request_id(scope: Scope) -> Optional[str]:
    value = Headers(scope=scope).get(REQUEST_ID_HEADER)
    if not value:
        return None
    value = value.strip()
    if not value or len(value) > MAX_REQUEST_ID_LENGTH:
        return None
    return value


class RequestContextMiddleware:
    def __init__(self, app: ASGIApp, slow_request_ms: Optional[int] = None) -> None:
        self.app = app
        self.slow_request_ms = (
            settings.slow_request_ms if slow_request_ms is None else slow_request_ms
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        method = scope.get("method", "")
        request_id = _incoming_request_id(scope) or str(ulid.ULID())
        token = set_request_id(request_id)

        if path in _SKIP_PATHS:
            try:
                await self.app(scope, receive, send)
            finally:
                reset_request_id(token)
            return

        endpoint = normalize_endpoint(path)
        status_code = 500
        start_time = time.perf_counter()
        prometheus_metrics.track_http_request_start(method)

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
                headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[REQUEST] Error in {method} {path} after {elapsed_ms:.2f}ms: {str(e)}"
            )
            raise
        finally:
            duration = time.perf_counter() - start_time
            prometheus_metrics.track_http_request_end(method)
            prometheus_metrics.record_http_request(
                method=method, endpoint=endpoint, duration=duration, status_code=status_code
            )
            if duration * 1000 > self.slow_request_ms:
                logger.warning(
                    f"[REQUEST] Slow request: {method} {path} took {duration * 1000:.2f}ms"
                )
            reset_request_id(token)
