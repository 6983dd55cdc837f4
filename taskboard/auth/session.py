"""Session token verification for taskboard.

Sessions are issued by the identity provider as signed JWTs. In production
they are RS256 tokens verified against the provider's JWKS endpoint
(`SESSION_JWKS_URL`). Without a JWKS URL, HS256 tokens signed with
`SESSION_SECRET_KEY` are accepted instead (local development and tests).
If neither is configured, or the secret is still the documented placeholder,
every token is rejected.
"""

import logging
import os
import jwt
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional, Dict
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Session configuration
SESSION_JWKS_URL = os.getenv("SESSION_JWKS_URL") or None
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY") or None
SESSION_ALGORITHM = os.getenv("SESSION_ALGORITHM", "HS256")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "__session")
SESSION_EXPIRATION_HOURS = int(os.getenv("SESSION_EXPIRATION_HOURS", "24"))

# Value shipped in .env.example; never accepted as a signing key.
PLACEHOLDER_SECRET_KEY = "change-me-in-production"


@lru_cache(maxsize=1)
def _jwks_client(jwks_url: str) -> jwt.PyJWKClient:
    # PyJWKClient caches fetched keys; one instance per process.
    return jwt.PyJWKClient(jwks_url)


def _shared_secret() -> Optional[str]:
    if not SESSION_SECRET_KEY or SESSION_SECRET_KEY == PLACEHOLDER_SECRET_KEY:
        return None
    return SESSION_SECRET_KEY


def create_session_token(user_id: str) -> str:
    """Create an HS256 session token for a user (development and tests only).
    
    Args:
        user_id: Identity provider user ID to encode in token
        
    Returns:
        Encoded JWT token string

    Raises:
        ValueError: If no usable SESSION_SECRET_KEY is configured
    """
    secret = _shared_secret()
    if secret is None:
        raise ValueError("SESSION_SECRET_KEY must be set to a non-placeholder value to issue tokens.")
    payload = {
        "sub": user_id,
        "exp": datetime.utcnow() + timedelta(hours=SESSION_EXPIRATION_HOURS),
        "iat": datetime.utcnow(),
    }
    return jwt.encode(payload, secret, algorithm=SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[Dict]:
    """Decode and validate a session token.
    
    Args:
        token: JWT token string to decode
        
    Returns:
        Decoded token payload (dict with 'sub' key for user_id), or None if invalid
    """
    try:
        if SESSION_JWKS_URL:
            signing_key = _jwks_client(SESSION_JWKS_URL).get_signing_key_from_jwt(token)
            return jwt.decode(token, signing_key.key, algorithms=["RS256"])
        secret = _shared_secret()
        if secret is None:
            logger.warning("Rejecting session token: set SESSION_JWKS_URL or SESSION_SECRET_KEY")
            return None
        return jwt.decode(token, secret, algorithms=[SESSION_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.PyJWTError:
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    """Extract user ID from a session token.
    
    Args:
        token: JWT token string
        
    Returns:
        User ID string, or None if token is invalid
    """
    payload = decode_session_token(token)
    if payload:
        return payload.get("sub")
    return None
