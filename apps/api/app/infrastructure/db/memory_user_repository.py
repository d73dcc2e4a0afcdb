import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.core.domain.errors import DuplicateEmailError
from app.core.domain.user import User, UserRole


class InMemoryUserRepository:
    """Process-local user store for tests and `USER_STORE=memory` dev runs."""

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        normalized = email.lower()
        async with self._lock:
            # Mirrors the UNIQUE(email) constraint of the users table.
            if any(u.email == normalized for u in self._users.values()):
                raise DuplicateEmailError(email)
            now = datetime.now(timezone.utc)
            user = User(
                user_id=self._next_id,
                first_name=first_name,
                last_name=last_name,
                email=normalized,
                password_hash=password_hash,
                role=UserRole(role),
                created_at=now,
                updated_at=now,
            )
            self._users[user.user_id] = user
            self._next_id += 1
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        normalized = email.lower()
        for user in self._users.values():
            if user.email == normalized and user.deleted_at is None:
                return user
        return None

    async def list_users(self) -> List[User]:
        return [u for u in self._users.values() if u.deleted_at is None]
