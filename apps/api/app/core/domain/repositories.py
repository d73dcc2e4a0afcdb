"""
Storage contracts for the users domain.

Implementations live in app.infrastructure.db; the service layer only sees
this Protocol, so Postgres and in-memory stores are interchangeable.
"""

from typing import List, Optional, Protocol

from app.core.domain.user import User, UserRole


class UserRepository(Protocol):
    async def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Persist a new user and return it with its store-assigned id.
        Raises DuplicateEmailError when the email is already taken.
        """
        ...

    async def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    async def list_users(self) -> List[User]:
        """Return every user that is not soft-deleted, oldest first."""
        ...
