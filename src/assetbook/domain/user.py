"""User domain service."""

import logging
from typing import Optional

from assetbook.database.base import Database
from assetbook.domain.entities import User
from assetbook.domain.errors import UserNotFound, ValidationError, user_not_found

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing ledger users."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, name: str, display_name: Optional[str] = None) -> int:
        """Create a user.

        The first user ever created receives 100% of every account that has
        no owner yet, in the same step.

        Args:
            name: Unique short name
            display_name: Human readable name (defaults to name)

        Returns:
            User ID

        Raises:
            ValidationError: If name is empty
            ConflictError: If name is taken
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("User name cannot be empty")

        is_first = self.db.get_first_user() is None
        user_id = self.db.create_user(name, display_name or name, claim_unowned_if_first=True)
        if is_first:
            logger.info("Created first user %s (%d); unowned accounts assigned to them", name, user_id)
        else:
            logger.info("Created user %s (%d)", name, user_id)
        return user_id

    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID, or None."""
        return self.db.get_user(user_id)

    def get_user_by_name(self, name: str) -> Optional[User]:
        """Get user by name, or None."""
        return self.db.get_user_by_name(name)

    def resolve_user(self, user: str | int) -> User:
        """Resolve a user name or ID.

        Raises:
            UserNotFound: If no such user exists
        """
        if isinstance(user, str) and user.strip().isdigit():
            user = int(user.strip())
        found = self.db.get_user(user) if isinstance(user, int) else self.db.get_user_by_name(user)
        if found is None:
            raise UserNotFound(user_not_found(user))
        return found

    def list_users(self, include_inactive: bool = False) -> list[User]:
        """List users ordered by name."""
        return self.db.list_users(include_inactive=include_inactive)
