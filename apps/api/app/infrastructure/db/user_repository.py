from typing import List, Optional

from psycopg import errors as pg_errors

from app.core.domain.errors import DuplicateEmailError
from app.core.domain.user import User, UserRole
from app.infrastructure.db import connection as db


TABLE_CREATE = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    deleted_at TIMESTAMPTZ,
    is_deleted SMALLINT NOT NULL DEFAULT 0,
    image_url TEXT
);
"""

USER_COLUMNS = (
    "id, first_name, last_name, email, password, role, "
    "created_at, updated_at, deleted_at, is_deleted, image_url"
)


def _row_to_user(row) -> User:
    getter = row.get if hasattr(row, "get") else lambda k: row[k]
    return User(
        user_id=getter("id"),
        first_name=getter("first_name"),
        last_name=getter("last_name"),
        email=getter("email"),
        password_hash=getter("password"),
        role=UserRole(getter("role")),
        created_at=getter("created_at"),
        updated_at=getter("updated_at"),
        deleted_at=getter("deleted_at"),
        is_deleted=getter("is_deleted") or 0,
        image_url=getter("image_url"),
    )


class PostgresUserRepository:
    def __init__(self, pool_getter=db.get_pool):
        self._get_pool = pool_getter
        self._table_ready = False

    async def ensure_table(self) -> None:
        if self._table_ready:
            return
        pool = self._get_pool()
        async with pool.connection() as conn, conn.cursor() as cur:
            await cur.execute(TABLE_CREATE)
            await conn.commit()
        self._table_ready = True

    async def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        await self.ensure_table()
        pool = self._get_pool()
        try:
            async with pool.connection() as conn, conn.cursor() as cur:
                await cur.execute(
                    f"""
                    INSERT INTO users (first_name, last_name, email, password, role)
                    VALUES (%(first_name)s, %(last_name)s, %(email)s, %(password)s, %(role)s)
                    RETURNING {USER_COLUMNS}
                    """,
                    {
                        "first_name": first_name,
                        "last_name": last_name,
                        "email": email.lower(),
                        "password": password_hash,
                        "role": UserRole(role).value,
                    },
                )
                row = await cur.fetchone()
                await conn.commit()
        except pg_errors.UniqueViolation as exc:
            raise DuplicateEmailError(email) from exc
        return _row_to_user(row)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        await self.ensure_table()
        pool = self._get_pool()
        async with pool.connection() as conn, conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE email = %(email)s AND deleted_at IS NULL
                """,
                {"email": email.lower()},
            )
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def list_users(self) -> List[User]:
        await self.ensure_table()
        pool = self._get_pool()
        async with pool.connection() as conn, conn.cursor() as cur:
            await cur.execute(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE deleted_at IS NULL
                ORDER BY id
                """
            )
            rows = await cur.fetchall()
        return [_row_to_user(row) for row in rows]
