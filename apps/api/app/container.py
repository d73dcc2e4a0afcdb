"""
Composition root: builds the concrete collaborators and hands them to the
services. Routers resolve services through these factories with Depends(),
and tests swap them via app.dependency_overrides.
"""

import os
from functools import lru_cache

from app.application.event_gateway import EventGateway, build_default_gateway
from app.application.user_service import UserService
from app.core.domain.repositories import UserRepository
from app.infrastructure.db.memory_user_repository import InMemoryUserRepository
from app.infrastructure.db.user_repository import PostgresUserRepository
from app.infrastructure.security.auth import PasswordHasher, TokenIssuer

USER_STORE = os.environ.get("USER_STORE", "postgres").lower()


@lru_cache
def get_user_repository() -> UserRepository:
    if USER_STORE == "memory":
        return InMemoryUserRepository()
    if USER_STORE != "postgres":
        raise RuntimeError(f"Unsupported USER_STORE: {USER_STORE}")
    return PostgresUserRepository()


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_env()


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache
def get_user_service() -> UserService:
    return UserService(
        repository=get_user_repository(),
        token_issuer=get_token_issuer(),
        hasher=get_password_hasher(),
    )


@lru_cache
def get_event_gateway() -> EventGateway:
    return build_default_gateway()
