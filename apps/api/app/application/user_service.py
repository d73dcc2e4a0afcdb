import logging
from typing import List

from app.core.domain.errors import DuplicateEmailError, UserNotFoundError
from app.core.domain.repositories import UserRepository
from app.core.domain.user import User, UserRole
from app.infrastructure.security.auth import PasswordHasher, TokenIssuer
from app.interfaces.api.schemas import (
    ResponseEnvelope,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)

logger = logging.getLogger("users")


def _failure(message: str, code: int = 400) -> ResponseEnvelope:
    return ResponseEnvelope(status="Failure", message=message, code=code, payload=None)


def _to_response(user: User) -> dict:
    return UserResponse(
        id=user.user_id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=user.role,
    ).model_dump(by_alias=True, mode="json")


def build_claims(user: User) -> dict:
    return {
        "sub": str(user.user_id),
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": UserRole(user.role).value,
    }


class UserService:
    """
    Registration, login and listing on top of a user store.

    Every async operation answers with a ResponseEnvelope; callers never see
    exceptions from the store or the token issuer.
    """

    def __init__(
        self,
        repository: UserRepository,
        token_issuer: TokenIssuer,
        hasher: PasswordHasher,
    ):
        self.repository = repository
        self.token_issuer = token_issuer
        self.hasher = hasher

    async def create(self, payload: UserCreate) -> ResponseEnvelope:
        if not (payload.first_name and payload.last_name and payload.email and payload.password):
            return _failure("All fields are required")
        role = payload.role or UserRole.USER

        existing = await self.repository.get_user_by_email(payload.email)
        if existing:
            logger.warning(
                "Registration blocked: email already registered",
                extra={"email": payload.email},
            )
            return _failure("User with this email already exists")

        try:
            user = await self.repository.create_user(
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                password_hash=self.hasher.hash(payload.password),
                role=role,
            )
        except DuplicateEmailError:
            # Lost the check-then-insert race to a concurrent registration.
            logger.warning(
                "Registration blocked: email taken concurrently",
                extra={"email": payload.email},
            )
            return _failure("User with this email already exists")
        except Exception:
            logger.exception("Error creating user", extra={"email": payload.email})
            return _failure("Error creating user", code=500)

        logger.info("User registered", extra={"user_id": user.user_id, "email": user.email})
        return ResponseEnvelope(status="Success", message="User created successfully", code=201)

    async def login(self, payload: UserLogin) -> ResponseEnvelope:
        if not payload.email or not payload.password:
            return _failure("Email and password are required")
        try:
            user = await self.repository.get_user_by_email(payload.email)
            if user is None:
                logger.warning("Login failed: unknown email", extra={"email": payload.email})
                return _failure("User not found")
            if not self.hasher.verify(payload.password, user.password_hash):
                logger.warning("Login failed: invalid password", extra={"email": payload.email})
                return _failure("Invalid password")
            token = self.token_issuer.issue(build_claims(user))
        except Exception as exc:
            logger.exception("Error during login", extra={"email": payload.email})
            return _failure(str(exc))

        logger.info("Login success", extra={"user_id": user.user_id, "email": user.email})
        return ResponseEnvelope(
            status="Success", message="Login successful", code=200, payload=token
        )

    async def get_all_users(self) -> ResponseEnvelope:
        try:
            users = await self.repository.list_users()
            if not users:
                raise UserNotFoundError("No users found")
            payload: List[dict] = [_to_response(user) for user in users]
        except Exception:
            # Not-found and store errors share the generic message.
            logger.exception("Error retrieving users")
            return _failure("Error retrieving users")

        return ResponseEnvelope(
            status="Success",
            message="Users retrieved successfully",
            code=200,
            payload=payload,
        )

    def find_one(self, user_id: int) -> str:
        return f"This action returns a #{user_id} user"

    def update(self, user_id: int, payload: UserUpdate) -> str:
        return f"This action updates a #{user_id} user"

    def remove(self, user_id: int) -> str:
        return f"This action removes a #{user_id} user"
