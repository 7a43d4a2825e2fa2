"""
Users service - persistence gateway for the users table
"""

import logging
from typing import List, Optional

from models.user import UserRecord
from services.base_service import BaseService

logger = logging.getLogger(__name__)

# Largest value a SERIAL (int4) id column can hold
MAX_ID = 2 ** 31 - 1


class UsersService(BaseService):
    """Service for user persistence operations"""

    def __init__(self, pool=None):
        super().__init__("users", pool)

    async def list_users(self) -> List[UserRecord]:
        """All users, oldest first"""
        rows = await self.read_all()
        return [UserRecord.model_validate(row) for row in rows]

    async def insert_user(self, name: str, email: str) -> UserRecord:
        """
        Insert a new user

        Args:
            name: Display name, already validated
            email: Email address, already validated

        Returns:
            The stored user with its assigned id and created_at

        Raises:
            ConstraintViolation: email already taken
            StoreConnectionError: store unreachable
        """
        logger.info(f"Creating new user: {email}")
        row = await self.create({"name": name, "email": email})
        return UserRecord.model_validate(row)

    async def delete_user(self, user_id: int) -> None:
        """Delete a user; a missing id is a no-op"""
        if not 1 <= user_id <= MAX_ID:
            logger.info(f"Delete of user {user_id} skipped: no row can have that id")
            return
        deleted = await self.delete(user_id)
        if deleted == 0:
            logger.info(f"Delete of user {user_id} matched no rows")


# Global service instance
_users_service: Optional[UsersService] = None


def get_users_service() -> UsersService:
    """Get the global users service instance"""
    global _users_service
    if _users_service is None:
        _users_service = UsersService()
    return _users_service
