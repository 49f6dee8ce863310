"""
Teacher Dashboard Backend — Abstract Identity Provider Interface
=================================================================

What:  Abstract base class for "who is this username/password pair?".
How:   Concrete providers implement authenticate(); the login route and the
       token gate only ever see this interface.
Who:   Called by POST /auth/login.

Implementations:
    - StaticCredentialProvider: one fixed pair from settings (development stand-in)
    - (Future) a provider backed by a user table with hashed passwords
"""

from abc import ABC, abstractmethod
from typing import Optional

from dashboard.schemas.auth import Identity


class IdentityProvider(ABC):
    """
    Contract:
        - authenticate() returns the Identity for a valid pair, None otherwise
        - never raises for a wrong password; the caller decides the HTTP answer
    """

    @abstractmethod
    async def authenticate(self, username: str, password: str) -> Optional[Identity]:
        """
        Resolve a credential pair to an Identity.

        Args:
            username: Login name exactly as submitted (already trimmed).
            password: Password exactly as submitted.

        Returns:
            Identity on success, None when the pair is not recognised.
        """
        ...
