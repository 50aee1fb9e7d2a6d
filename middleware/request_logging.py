"""
Request-scoped logging.

Every request gets an id (caller-supplied X-Request-ID or a fresh uuid4) that
is bound into structlog contextvars, so all log lines emitted while handling
the request carry it, and echoed back in the X-Request-ID response header.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from shared.logging import get_logger, hash_ip
from shared.request_utils import get_client_ip

log = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            if response.status_code >= 500:
                level = "error"
            elif response.status_code >= 400:
                level = "warning"
            else:
                level = "info"
            getattr(log, level)(
                "request_completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
                client_ip=hash_ip(get_client_ip(request)),
            )
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
