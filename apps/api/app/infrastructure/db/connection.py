import os
from typing import Optional

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool


DATABASE_URL = os.environ.get("DATABASE_URL")

pool: Optional[AsyncConnectionPool] = None


async def init_pool() -> None:
    global pool
    if pool is not None:
        return
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set")

    # Small pool for now; adjust once the API grows.
    pool = AsyncConnectionPool(
        conninfo=DATABASE_URL,
        min_size=1,
        max_size=5,
        max_idle=5,
        timeout=10,
        open=False,
        # Dict rows keep the row mapping simple.
        kwargs={"row_factory": dict_row},
    )
    await pool.open()


async def close_pool() -> None:
    global pool
    if pool is not None:
        await pool.close()
        pool = None


def get_pool() -> AsyncConnectionPool:
    if pool is None:
        raise RuntimeError("Database pool is not initialized")
    return pool
