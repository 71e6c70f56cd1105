"""Request id propagation.

Every request gets an id, taken from the ``X-Request-ID`` header or
generated.  It lives in a ContextVar for the duration of the request,
is stamped onto every log record by a root-logger filter, and is echoed
back on the response.  A ContextVar (not a thread-local) keeps the id
per request even when requests share a thread.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_INCOMING_ID = 128

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def install_log_filter() -> None:
    """Attach the request-id filter to every root handler (idempotent)."""
    root = logging.getLogger()
    targets: list[logging.Filterer] = [root, *root.handlers]
    for target in targets:
        if not any(isinstance(f, _RequestContextFilter) for f in target.filters):
            target.addFilter(_RequestContextFilter())


install_log_filter()


def _incoming_id(request: Request) -> str | None:
    raw = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if not raw or len(raw) > _MAX_INCOMING_ID:
        return None
    return raw


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request id, time the request and log one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = _incoming_id(request) or str(uuid.uuid4())
        token = request_id_var.set(req_id)
        try:
            start = time.monotonic()
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            logger.info(
                "%s %s -> %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        finally:
            request_id_var.reset(token)
