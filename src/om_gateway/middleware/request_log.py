"""Request logging middleware.

One access-log line per request on the ``om.request`` logger, tagged with a
request ID that the error handler and routers echo in ApiResponse and that is
returned in the X-Request-ID header. A caller-supplied X-Request-ID is reused
only when it is short and plain, so it cannot forge log lines.

    INFO  [POST] /api/v1/offers/ofr_123/accept → 200 (12ms) req_a1b2c3d4e5f6
    WARN  [POST] /api/v1/offers/ofr_123/accept → 409 (8ms) req_...   (4xx)
    ERROR [POST] /api/v1/offers → 500 (3ms) req_...                   (5xx)

/health probes log at DEBUG.
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("om.request")

_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9_.:-]{1,64}")
_QUIET_PATHS = frozenset({"/health"})


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _REQUEST_ID_RE.fullmatch(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


def _level_for(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.log(
            _level_for(request.url.path, response.status_code),
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
