"""
Teacher Dashboard Backend — Request ID Middleware
==================================================

What:  Gives every request a short correlation ID.
How:   Reuses an incoming X-Request-ID header when it is a plain token,
       otherwise generates one. The ID goes into a ContextVar for loggers
       and exception handlers and is echoed back on the response.
When:  Runs before the access logger so its lines carry the ID.

Accepted client IDs:
    1-64 characters from [A-Za-z0-9._-]. Anything else (newlines, spaces,
    quotes, oversized values) is discarded and replaced, so a caller can't
    forge extra log lines through the header.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

# ── Context Variable ──────────────────────────────────────────────────────
# Coroutine-local: concurrent requests on one event loop each see their own ID.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accept_request_id(raw: Optional[str]) -> str:
    """The client's ID if it is a safe token, else a fresh one."""
    if raw and _CLIENT_ID_PATTERN.fullmatch(raw):
        return raw
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns, exposes and echoes the request's correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER))

        # ContextVar for loggers, request.state for handlers
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
