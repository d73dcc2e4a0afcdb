import json
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_PRIVATE_KEY = os.environ.get("JWT_PRIVATE_KEY")
JWT_PRIVATE_KEY_ID = os.environ.get("JWT_PRIVATE_KEY_ID", "current")
JWT_PUBLIC_KEYS_RAW = os.environ.get("JWT_PUBLIC_KEYS")

JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM") or ("RS256" if JWT_PRIVATE_KEY else "HS256")
JWT_ISSUER = os.environ.get("JWT_ISSUER", "users-api")
JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", "users-web")
JWT_EXPIRE_MINUTES = int(os.environ.get("JWT_EXPIRE_MINUTES", "60"))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordHasher:
    """One-way salted hashing for stored passwords."""

    def __init__(self, schemes=("pbkdf2_sha256",)):
        # Use pbkdf2_sha256 to sidestep bcrypt backend issues in slim images.
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        return self._context.verify(password, password_hash)


class TokenIssuer:
    """
    Signs time-bound access tokens around a claims payload.

    HS256 uses a shared secret; RS256 signs with a private key and verifies
    against a kid -> public key map, so rotated keys keep validating.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: str = "HS256",
        issuer: str = JWT_ISSUER,
        audience: str = JWT_AUDIENCE,
        expire_minutes: int = JWT_EXPIRE_MINUTES,
        private_key: Optional[str] = None,
        private_key_id: str = "current",
        public_keys: Optional[Dict[str, str]] = None,
    ):
        if algorithm.startswith("RS"):
            if not private_key:
                raise RuntimeError("JWT_PRIVATE_KEY is required for RS256 signing.")
        else:
            if not secret:
                raise RuntimeError(
                    "JWT_SECRET env var is required for HS256 or provide JWT_PRIVATE_KEY for RS256."
                )
            if len(secret) < 32:
                raise RuntimeError("JWT_SECRET must be at least 32 characters for HS256.")
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.expire_minutes = expire_minutes
        self.private_key = private_key
        self.private_key_id = private_key_id
        self.public_keys = public_keys or {}

    @classmethod
    def from_env(cls) -> "TokenIssuer":
        public_keys: Dict[str, str] = {}
        if JWT_PUBLIC_KEYS_RAW:
            try:
                parsed = json.loads(JWT_PUBLIC_KEYS_RAW)
                if not isinstance(parsed, dict):
                    raise ValueError("JWT_PUBLIC_KEYS must be a JSON object mapping kid to public key PEM.")
                public_keys = {str(k): v for k, v in parsed.items()}
            except Exception as exc:  # pragma: no cover - parse guard
                raise RuntimeError(f"Failed to parse JWT_PUBLIC_KEYS: {exc}") from exc
        return cls(
            secret=JWT_SECRET,
            algorithm=JWT_ALGORITHM,
            issuer=JWT_ISSUER,
            audience=JWT_AUDIENCE,
            expire_minutes=JWT_EXPIRE_MINUTES,
            private_key=JWT_PRIVATE_KEY,
            private_key_id=JWT_PRIVATE_KEY_ID,
            public_keys=public_keys,
        )

    def issue(self, claims: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
        exp_minutes = expires_minutes if expires_minutes is not None else self.expire_minutes
        now = _utcnow()
        to_encode = dict(claims)
        to_encode.update(
            {
                "iss": self.issuer,
                "aud": self.audience,
                "iat": int(now.timestamp()),
                "exp": now + timedelta(minutes=exp_minutes),
                "jti": secrets.token_hex(16),
                "token_type": "access",
            }
        )
        headers = {}
        key = self.secret
        if self.algorithm.startswith("RS"):
            headers["kid"] = self.private_key_id
            key = self.private_key
        return jwt.encode(to_encode, key, algorithm=self.algorithm, headers=headers)

    def decode(self, token: str, expected_type: str = "access") -> Optional[dict]:
        try:
            key = self._resolve_decode_key(token)
            if key is None:
                return None
            payload = jwt.decode(
                token,
                key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub", "jti", "token_type"]},
            )
            if payload.get("token_type") != expected_type:
                return None
            return payload
        except JWTError:
            return None

    def _resolve_decode_key(self, token: str) -> Optional[str]:
        if self.algorithm.startswith("RS"):
            try:
                header = jwt.get_unverified_header(token)
            except JWTError:
                return None
            kid = header.get("kid")
            if kid and kid in self.public_keys:
                return self.public_keys[kid]
            if kid is None or kid == self.private_key_id:
                return self.private_key
            return None
        return self.secret
