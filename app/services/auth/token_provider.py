"""Opaque session-token authentication provider."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session as DBSession

from app.config import settings
from app.models.user import AppUser
from app.models.session import Session
from app.services.auth.base import AuthProvider


class TokenAuthProvider(AuthProvider):
    """
    Resolves session tokens stored in the database.

    The token is read from an "Authorization: Bearer" header, falling back to
    the session cookie.
    """

    def _generate_session_token(self) -> str:
        """Generate a cryptographically secure session token."""
        return secrets.token_urlsafe(32)

    def _token_from_request(self, request: Request) -> Optional[str]:
        authorization = request.headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return request.cookies.get(settings.session_cookie_name)

    async def get_user_from_request(self, db: DBSession, request: Request) -> Optional[AppUser]:
        """Extract user from bearer token or session cookie."""
        token = self._token_from_request(request)
        if not token:
            return None

        # Find valid session
        now = datetime.now(timezone.utc)
        session = db.query(Session).filter(
            Session.token == token,
            Session.expires_at > now
        ).first()

        if not session:
            return None

        return session.user

    def create_session(
        self, db: DBSession, user: AppUser, user_agent: Optional[str] = None
    ) -> str:
        """Create a new session for the user."""
        token = self._generate_session_token()
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=settings.session_max_age)

        session = Session(
            user_id=user.id,
            token=token,
            expires_at=expires_at,
            user_agent=(user_agent or "")[:512] or None,
        )
        db.add(session)
        db.commit()

        return token

    def revoke_session(self, db: DBSession, token: str) -> bool:
        """Revoke a session by its token."""
        session = db.query(Session).filter(Session.token == token).first()
        if not session:
            return False
        db.delete(session)
        db.commit()
        return True


# Singleton instance
token_auth_provider = TokenAuthProvider()
