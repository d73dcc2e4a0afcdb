from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

from app import container
from app.infrastructure.db import connection as db
from app.interfaces.api.routers import events, payments, users


@asynccontextmanager
async def lifespan(_: FastAPI):
    uses_postgres = container.USER_STORE == "postgres"
    if uses_postgres:
        await db.init_pool()
        await container.get_user_repository().ensure_table()
    try:
        yield
    finally:
        if uses_postgres:
            await db.close_pool()


app = FastAPI(title="Users API", version="0.1.0", lifespan=lifespan)

frontend_origin = os.environ.get("FRONTEND_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


app.include_router(users.router)
app.include_router(payments.router)
app.include_router(events.router)
