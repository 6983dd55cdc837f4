"""Identity provider integration for taskboard (Clerk Backend API)."""

import logging
import os
from typing import List, Optional
import requests
from dotenv import load_dotenv

from taskboard.models.user import DirectoryUser, Role

load_dotenv()

logger = logging.getLogger(__name__)

CLERK_API_URL = os.getenv("CLERK_API_URL", "https://api.clerk.com/v1")
IDENTITY_TIMEOUT_SEC = int(os.getenv("IDENTITY_TIMEOUT_SEC", "10"))


class IdentityProviderError(Exception):
    """Raised when a call to the identity provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UserNotFound(IdentityProviderError):
    """Raised when the provider has no user with the requested ID."""


def parse_role(value: Optional[str]) -> Optional[Role]:
    """Convert a metadata role value to a Role, or None for unset/unknown values."""
    if not value:
        return None
    try:
        return Role(str(value).lower())
    except ValueError:
        return None


def _primary_email(user_json: dict) -> Optional[str]:
    primary_id = user_json.get("primary_email_address_id")
    for address in user_json.get("email_addresses") or []:
        if address.get("id") == primary_id:
            return address.get("email_address")
    return None


class ClerkClient:
    """Client for the identity provider's user directory and metadata."""
    
    def __init__(self, secret_key: Optional[str] = None, api_url: Optional[str] = None):
        """Initialize the identity provider client.
        
        Args:
            secret_key: Backend API secret key. If None, reads from CLERK_SECRET_KEY env var.
            api_url: Backend API base URL. If None, uses CLERK_API_URL.
        """
        self.secret_key = secret_key or os.getenv("CLERK_SECRET_KEY")
        if not self.secret_key:
            raise ValueError("Identity provider secret key is required. Set CLERK_SECRET_KEY env var.")
        
        self.api_url = (api_url or CLERK_API_URL).rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
    
    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.api_url}{path}"
        try:
            response = requests.request(
                method, url, headers=self.headers, timeout=IDENTITY_TIMEOUT_SEC, **kwargs
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Identity provider {method} {path} failed: {type(e).__name__}: {str(e)}")
            status_code = getattr(e.response, "status_code", None)
            raise IdentityProviderError(f"Identity provider request failed: {e}", status_code) from e
    
    def normalize_user(self, user_json: dict) -> DirectoryUser:
        """Normalize a provider user record to a DirectoryUser.
        
        Args:
            user_json: User object from the Backend API
            
        Returns:
            DirectoryUser with the role taken from public metadata
        """
        metadata = user_json.get("public_metadata") or {}
        return DirectoryUser(
            id=user_json["id"],
            first_name=user_json.get("first_name"),
            last_name=user_json.get("last_name"),
            email=_primary_email(user_json),
            image_url=user_json.get("image_url"),
            role=parse_role(metadata.get("role")),
        )
    
    def get_user(self, user_id: str) -> DirectoryUser:
        """Fetch a single user record (fresh, never cached).

        Raises:
            UserNotFound: If the provider answers 404 (e.g. the user was deleted)
        """
        try:
            return self.normalize_user(self._request("GET", f"/users/{user_id}"))
        except IdentityProviderError as e:
            if e.status_code == 404:
                raise UserNotFound(f"User {user_id} not found", 404) from e
            raise
    
    def search_users(self, query: str) -> List[DirectoryUser]:
        """Search the user directory by name or email.
        
        Args:
            query: Free-text search term
            
        Returns:
            Matching users in provider order
        """
        payload = self._request("GET", "/users", params={"query": query})
        # Newer API versions wrap the list as {"data": [...], "total_count": n}
        users = payload.get("data", []) if isinstance(payload, dict) else payload
        return [self.normalize_user(u) for u in users]
    
    def set_user_role(self, user_id: str, role: str) -> None:
        """Write ``role`` into the user's public metadata."""
        self._request("PATCH", f"/users/{user_id}/metadata", json={"public_metadata": {"role": role}})
        logger.info(f"Set role {role} for user {user_id}")
    
    def clear_user_role(self, user_id: str) -> None:
        """Remove the role key from the user's public metadata."""
        # Metadata updates are merged; a null value deletes the key.
        self._request("PATCH", f"/users/{user_id}/metadata", json={"public_metadata": {"role": None}})
        logger.info(f"Cleared role for user {user_id}")
