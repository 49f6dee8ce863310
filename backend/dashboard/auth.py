"""
Teacher Dashboard Backend — Authentication and Authorization Gates
===================================================================

What:  FastAPI dependencies guarding every non-public route.
How:   `authenticate` is attached at router level (runs first for every route
       of the router); `require_roles(...)` is declared per route and runs
       after it.

Authentication (authenticate):
    1. Token from `Authorization: Bearer <token>`, else from the auth cookie
    2. No token at all           → 401 "Access token required"
    3. TokenService.verify fails → 403 "Invalid or expired token"
    4. Identity stored on request.state.identity

Authorization (require_roles):
    No identity on the request   → 401 "Unauthorized"
    identity.role not allowed    → 403 "Forbidden" (logged with user and roles)
"""

import logging
from typing import Callable, Iterable, Optional

from fastapi import Request

from dashboard.exceptions import AuthenticationError, ForbiddenError
from dashboard.models.enums import Role
from dashboard.schemas.auth import Identity
from dashboard.services.auth_service import InvalidTokenError, TokenService

logger = logging.getLogger(__name__)


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """Bearer header first, cookie second. Returns None when neither is usable."""
    header = request.headers.get("Authorization", "").strip()
    if header:
        scheme, _, credentials = header.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    cookie = request.cookies.get(cookie_name)
    return cookie or None


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def authenticate(request: Request) -> Identity:
    """Verify the presented token and attach its Identity to the request."""
    settings = request.app.state.settings
    token = extract_token(request, settings.auth_cookie_name)
    if token is None:
        raise AuthenticationError("Access token required")

    try:
        identity = get_token_service(request).verify(token)
    except InvalidTokenError as exc:
        raise ForbiddenError(
            "Invalid or expired token", context={"reason": str(exc)}
        ) from exc

    request.state.identity = identity
    return identity


def authorize(identity: Optional[Identity], allowed_roles: Iterable[Role]) -> Identity:
    """Pure role check. Raises unless `identity` holds one of `allowed_roles`."""
    if identity is None:
        raise AuthenticationError("Unauthorized")

    allowed = frozenset(allowed_roles)
    if identity.role not in allowed:
        logger.warning(
            "Authorization failed: user_id=%s role=%s required=%s",
            identity.id,
            identity.role.value,
            sorted(r.value for r in allowed),
        )
        raise ForbiddenError("Forbidden")
    return identity


def require_roles(*roles: Role) -> Callable[[Request], Identity]:
    """
    Dependency factory for per-route role checks.

    Example:
        @router.post("", dependencies=[Depends(require_roles(Role.ADMIN, Role.TEACHER))])
    """

    def dependency(request: Request) -> Identity:
        return authorize(getattr(request.state, "identity", None), roles)

    return dependency
