"""Abstract base class for authentication providers."""
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session as DBSession

from app.models.user import AppUser


class AuthProvider(ABC):
    """
    Abstract authentication provider interface.

    Login and token issuance belong to the external identity flow; the API
    only resolves an already-issued credential to an AppUser.
    """

    @abstractmethod
    async def get_user_from_request(self, db: DBSession, request: Request) -> Optional[AppUser]:
        """
        Extract and validate user from request (bearer token, session cookie).

        Returns AppUser if authenticated, None otherwise.
        """
        pass

    @abstractmethod
    def create_session(
        self, db: DBSession, user: AppUser, user_agent: Optional[str] = None
    ) -> str:
        """
        Create a new session for the user.

        Returns the opaque session token.
        """
        pass

    @abstractmethod
    def revoke_session(self, db: DBSession, token: str) -> bool:
        """
        Revoke/invalidate a session by its token.

        Returns True if session was revoked, False if not found.
        """
        pass
