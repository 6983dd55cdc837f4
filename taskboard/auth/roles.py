"""Role checks for admin pages and actions."""

from typing import Optional

from taskboard.api.errors import Unauthorized
from taskboard.models.user import Caller, Role


def check_role(caller: Optional[Caller], role: Role) -> bool:
    """Return True if the caller currently holds ``role``."""
    return caller is not None and caller.role == role


def require_admin(caller: Optional[Caller]) -> Caller:
    """Gate for admin pages and role actions.

    Evaluated on every request from a freshly loaded Caller; nothing is cached.

    Raises:
        Unauthorized: If there is no session, or the caller is not an admin
    """
    if caller is None:
        raise Unauthorized(authenticated=False)
    if not check_role(caller, Role.ADMIN):
        raise Unauthorized(authenticated=True)
    return caller
