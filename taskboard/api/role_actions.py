"""Server-side role actions behind the admin directory forms."""

import logging
from typing import Optional

from taskboard.api.errors import InvalidInput
from taskboard.auth.roles import require_admin
from taskboard.integrations.clerk import ClerkClient, parse_role
from taskboard.models.user import Caller

logger = logging.getLogger(__name__)


def set_role(caller: Optional[Caller], client: ClerkClient, user_id: Optional[str], role: Optional[str]) -> None:
    """Assign ``role`` to the target user.

    Args:
        caller: The requesting user (must be an admin)
        client: Identity provider client
        user_id: Target user ID from the form
        role: Role value from the form (``admin`` or ``moderator``)

    Raises:
        Unauthorized: If the caller is not signed in or not an admin
        InvalidInput: If the user ID is missing or the role is unknown
    """
    admin = require_admin(caller)
    if not user_id:
        raise InvalidInput("User ID is required")
    parsed = parse_role(role)
    if parsed is None:
        raise InvalidInput("Role must be one of: admin, moderator")
    client.set_user_role(user_id, parsed.value)
    logger.info(f"Admin {admin.id} assigned role {parsed.value} to {user_id}")


def remove_role(caller: Optional[Caller], client: ClerkClient, user_id: Optional[str]) -> None:
    """Clear the target user's role. Same gate as ``set_role``."""
    admin = require_admin(caller)
    if not user_id:
        raise InvalidInput("User ID is required")
    client.clear_user_role(user_id)
    logger.info(f"Admin {admin.id} removed role from {user_id}")
