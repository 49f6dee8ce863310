"""
Teacher Dashboard Backend — Token and Credential Services
==========================================================

What:  Issues and verifies signed bearer tokens (PyJWT, HS256) and checks the
       fixed login credential pair.
How:   TokenService embeds {username, role, id, iat, exp} and turns a token
       back into an Identity; StaticCredentialProvider implements
       IdentityProvider for the one configured pair.
Who:   TokenService is used by the login route (issue) and the authentication
       gate (verify). Both objects are built by the app factory and stored on
       `app.state`.

Failure Model:
    verify() raises InvalidTokenError for every rejected token (bad signature,
    expired, malformed, unknown role, missing claims). The gate maps that one
    exception to 403 without saying which check failed.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from dashboard.models.enums import Role
from dashboard.schemas.auth import Identity
from dashboard.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """A presented token cannot be trusted."""


class TokenService:
    """Signs and verifies identity tokens with a shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """Return a signed token for the identity, expiring after `ttl`."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "username": identity.username,
            "role": identity.role.value,
            "id": identity.id,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        """
        Check signature and expiry, then decode the Identity.

        Raises:
            InvalidTokenError: for any reason the token is not acceptable.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "username", "role", "id"]},
            )
        except jwt.ExpiredSignatureError as exc:
            logger.debug("Rejected expired token")
            raise InvalidTokenError("expired") from exc
        except jwt.PyJWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidTokenError("invalid") from exc

        try:
            return Identity(
                username=payload["username"],
                role=Role(payload["role"]),
                id=int(payload["id"]),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("malformed claims") from exc


class StaticCredentialProvider(IdentityProvider):
    """
    Accepts exactly one username/password pair.

    The returned identity is always {username, role=Teacher, id=1}.
    """

    def __init__(self, username: str, password: str):
        self._username = username
        self._password = password

    async def authenticate(self, username: str, password: str) -> Optional[Identity]:
        username_ok = secrets.compare_digest(username.encode(), self._username.encode())
        password_ok = secrets.compare_digest(password.encode(), self._password.encode())
        if not (username_ok and password_ok):
            return None
        return Identity(username=username, role=Role.TEACHER, id=1)
