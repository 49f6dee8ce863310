"""
Teacher Dashboard Backend — Access Logging Middleware
======================================================

What:  One audit line per HTTP request: who did what to which resource,
       with status, duration and client address.
How:   Measures wall time around call_next. After the handler ran, the
       Identity that `authenticate` attached to request.state names the
       caller; requests that never got that far are logged as "anonymous".
       Level follows the status class (5xx ERROR, 4xx WARNING, else INFO).

Example:
    PUT /students/3 200 4.2ms [a1b2c3d4] user=1 role=Teacher from 127.0.0.1
    GET /students 401 0.8ms [9f0e1d2c] user=anonymous from 127.0.0.1

Not logged: request bodies (student records, passwords), the query string
(search terms) and the Authorization header. GET /health is skipped so
load-balancer checks don't flood the log.
"""

import logging
import time
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from dashboard.middleware.request_id import request_id_var

logger = logging.getLogger("dashboard.access")

SKIP_PATHS = frozenset({"/health"})

ANONYMOUS = "anonymous"


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def caller_of(request: Request) -> Tuple[str, Optional[str]]:
    """(user id, role) of the authenticated caller, or ("anonymous", None)."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        return ANONYMOUS, None
    return str(identity.id), identity.role.value


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        # Identity is only known once the route dependencies have run
        user_id, role = caller_of(request)
        caller = f"user={user_id}" + (f" role={role}" if role else "")
        client_ip = request.client.host if request.client else "unknown"
        status = response.status_code
        rid = request_id_var.get("")

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] %s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            caller,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
                "role": role,
                "client_ip": client_ip,
            },
        )
        return response
