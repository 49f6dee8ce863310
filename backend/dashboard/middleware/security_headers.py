"""
Teacher Dashboard Backend — Security Headers Middleware
========================================================

What:  Adds the usual hardening headers to every response.
How:   Post-processes the response from call_next. Values are constructor
       arguments so tests and deployments can override them.

Headers:
    X-Content-Type-Options: nosniff
    X-Frame-Options: DENY
    Referrer-Policy: no-referrer (default)
    Content-Security-Policy: default-src 'none'; frame-ancestors 'none' (default)
    Strict-Transport-Security: only when hsts_max_age > 0
"""

from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

DEFAULT_CSP = "default-src 'none'; frame-ancestors 'none'"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        *,
        referrer_policy: str = "no-referrer",
        content_security_policy: Optional[str] = DEFAULT_CSP,
        hsts_max_age: int = 0,
    ) -> None:
        super().__init__(app)
        self.referrer_policy = referrer_policy
        self.content_security_policy = content_security_policy
        self.hsts_max_age = hsts_max_age

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = self.referrer_policy
        # Swagger UI at /docs needs inline scripts; leave its CSP alone.
        if self.content_security_policy and not request.url.path.startswith(("/docs", "/redoc")):
            response.headers["Content-Security-Policy"] = self.content_security_policy
        if self.hsts_max_age > 0:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.hsts_max_age}; includeSubDomains"
            )
        return response
