"""Unified API response envelope for the offers API.

Success:  {"code": 0, "message": "success", "error_kind": null, "data": {...}, ...}
Failure:  {"code": 3004, "message": "...", "error_kind": "WrongTurn", "data": null, ...}

``error_kind`` carries the negotiation error taxonomy (NotAuthorized,
NotActive, WrongTurn, WrongDirection, OutOfBounds, Conflict, NotFound) so
clients can map a failure to copy without parsing ``message``. Every envelope
also carries ``timestamp`` and the ``request_id`` from RequestLogMiddleware.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from src.om_common.errors import AppError


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    error_kind: str | None = None
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def success_response(data: Any = None, request_id: str | None = None) -> ApiResponse:
    return ApiResponse(data=data, request_id=request_id or _new_request_id())


def error_response(
    code: int, message: str, error_kind: str | None = None, request_id: str | None = None
) -> ApiResponse:
    return ApiResponse(
        code=code,
        message=message,
        error_kind=error_kind,
        request_id=request_id or _new_request_id(),
    )


def from_app_error(exc: AppError, request_id: str | None = None) -> ApiResponse:
    return error_response(exc.code, exc.message, exc.kind, request_id)
