"""
Authentication service package.

Resolves opaque session tokens issued by the external identity flow.

Usage:
    from app.services.auth import get_auth_provider
    from app.services.auth.dependencies import get_current_user, get_optional_user

    # In routes:
    @router.get("/protected")
    async def protected_route(user: AppUser = Depends(get_current_user)):
        ...
"""
from app.services.auth.base import AuthProvider
from app.services.auth.token_provider import token_auth_provider


def get_auth_provider() -> AuthProvider:
    """Factory function to get the configured auth provider."""
    return token_auth_provider


__all__ = [
    "AuthProvider",
    "get_auth_provider",
    "token_auth_provider",
]
