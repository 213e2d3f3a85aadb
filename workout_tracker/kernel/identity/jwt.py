"""
JWT session token management for authentication.

Tokens are stateless: nothing is stored server-side, so a token stays
valid until it expires. Logging out means the client discards it.
"""

import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Protocol

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ValidationError

from workout_tracker.config import get_settings
from workout_tracker.kernel.errors import ExpiredTokenError, InvalidTokenError

SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")
TOKEN_TYPE = "access"


class TokenSubject(Protocol):
    """Anything carrying the identity claims (a User row, for instance)."""

    id: uuid.UUID
    email: str


class SessionClaims(BaseModel):
    """Claims extracted from a validated session token."""

    subject_id: uuid.UUID
    email: str
    issued_at: datetime
    expires_at: datetime


class IssuedToken(BaseModel):
    """A freshly minted session token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until the token expires
    expires_at: datetime


class JWTManager:
    """
    JWT token creation and verification.

    Only symmetric HMAC algorithms are accepted, and validation pins the
    algorithm so a token cannot pick its own (including "none").
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ):
        settings = get_settings() if None in (secret_key, algorithm, expire_minutes) else None
        self.secret_key = secret_key if secret_key is not None else settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expire_minutes = expire_minutes if expire_minutes is not None else settings.jwt_expire_minutes

        if not self.secret_key:
            raise ValueError("JWT secret must not be empty")
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm: {self.algorithm}")

    def issue(
        self,
        subject: TokenSubject,
        expires_delta: Optional[timedelta] = None,
    ) -> IssuedToken:
        """
        Create a signed session token for an identity.

        Args:
            subject: The identity (needs id and email)
            expires_delta: Optional custom lifetime

        Returns:
            IssuedToken with the encoded JWT and its expiry
        """
        # JWT timestamps have second precision
        now = datetime.now(timezone.utc).replace(microsecond=0)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))

        payload = {
            "sub": str(subject.id),
            "email": subject.email,
            "iat": now,
            "exp": expire,
            "type": TOKEN_TYPE,
        }

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(
            access_token=token,
            expires_in=max(int((expire - now).total_seconds()), 0),
            expires_at=expire,
        )

    def validate(self, token: str) -> SessionClaims:
        """
        Verify and decode a session token.

        Args:
            token: Encoded JWT

        Returns:
            SessionClaims for the token's subject

        Raises:
            InvalidTokenError: Malformed, tampered, or wrong algorithm
            ExpiredTokenError: Correctly signed but past its expiry
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise InvalidTokenError("Malformed token") from exc

        if header.get("alg") != self.algorithm:
            raise InvalidTokenError("Unexpected token algorithm")

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={
                    "require_exp": True,
                    "require_iat": True,
                    "require_sub": True,
                },
            )
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token has expired") from exc
        except JWTError as exc:
            raise InvalidTokenError("Token signature or claims are invalid") from exc

        if payload.get("type") != TOKEN_TYPE:
            raise InvalidTokenError("Not a session token")

        try:
            return SessionClaims(
                subject_id=uuid.UUID(payload["sub"]),
                email=payload["email"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise InvalidTokenError("Token claims are incomplete") from exc


@lru_cache
def get_jwt_manager() -> JWTManager:
    """Get the process-wide JWT manager built from settings."""
    return JWTManager()

