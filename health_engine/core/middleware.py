"""
Request logging middleware.

Each request runs with a request id in context: the caller's X-Request-ID
when it sends a usable one, otherwise a fresh 8-character id. The id is
echoed back in the response header and appears on every log line written
while the request is handled.
"""

import logging
import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from health_engine.core.logging_config import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed incoming id, otherwise mint one."""
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per engine request with status and duration."""

    # Probes and docs are not worth a log line
    QUIET_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_request_id(request_id)
        started = time.perf_counter()
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error", extra={"method": request.method, "path": path})
            clear_request_id()
            raise

        if path not in self.QUIET_PATHS:
            logger.log(
                logging.WARNING if response.status_code >= 400 else logging.INFO,
                "%s %s -> %d",
                request.method,
                path,
                response.status_code,
                extra={"duration_ms": round((time.perf_counter() - started) * 1000, 2)},
            )
        clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
