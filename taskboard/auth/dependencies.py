"""FastAPI dependencies for authentication."""

import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from taskboard.api.errors import Unauthenticated
from taskboard.auth.session import SESSION_COOKIE_NAME, get_user_id_from_token
from taskboard.integrations.clerk import ClerkClient, UserNotFound
from taskboard.models.user import Caller

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_session_user_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Optional[str]:
    """Return the session's user ID, or None without a valid session.

    The session token is read from the `Authorization: Bearer` header, falling
    back to the session cookie set by the identity provider's browser SDK.
    """
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None
    return get_user_id_from_token(token)


def get_current_user_id(user_id: Optional[str] = Depends(get_session_user_id)) -> str:
    """Require a session (API endpoints).
    
    Raises:
        Unauthenticated: If there is no valid session token
    """
    if not user_id:
        raise Unauthenticated()
    return user_id


def get_identity_client() -> ClerkClient:
    """Identity provider client (dependency, overridden in tests)."""
    return ClerkClient()


def get_caller(
    user_id: Optional[str] = Depends(get_session_user_id),
    client: ClerkClient = Depends(get_identity_client),
) -> Optional[Caller]:
    """Load the caller and their current role from the identity provider.

    Returns None without a session, or when the session's user no longer
    exists at the provider. The user record is fetched on every request so
    role changes apply immediately.
    """
    if not user_id:
        return None
    try:
        user = client.get_user(user_id)
    except UserNotFound:
        logger.warning(f"Session user {user_id} not found at identity provider; treating as signed out")
        return None
    return Caller(id=user.id, role=user.role, email=user.email)
