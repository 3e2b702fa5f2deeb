"""Access policy — role checks for privileged operations.

Roles come from the stored user profile; there is no built-in list of
privileged ids.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from familydays.data.models import Role

if TYPE_CHECKING:
    from familydays.data.db import UserDB

logger = logging.getLogger(__name__)


class PermissionDenied(Exception):
    """Raised when a user lacks the role an operation requires."""


class AccessPolicy:
    """Resolves user roles through the users collection."""

    def __init__(self, users: UserDB) -> None:
        self._users = users

    def role_of(self, user_id: str) -> Role:
        """The stored role, or ``user`` for unknown ids."""
        profile = self._users.get_profile(user_id)
        return profile.role if profile else Role.USER

    def is_admin(self, user_id: str) -> bool:
        return self.role_of(user_id) == Role.ADMIN

    def require_admin(self, user_id: str) -> None:
        if not self.is_admin(user_id):
            logger.warning("Denied admin operation for user %s", user_id)
            raise PermissionDenied(f"User {user_id!r} is not an admin")
