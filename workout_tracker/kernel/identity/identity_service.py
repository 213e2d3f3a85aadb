"""
Identity service for registration, login and credential changes.
"""

import asyncio
import secrets
import uuid
from functools import lru_cache
from typing import Optional

from workout_tracker.kernel.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UniqueViolationError,
)
from workout_tracker.kernel.identity.jwt import IssuedToken, JWTManager, get_jwt_manager
from workout_tracker.kernel.identity.password import PasswordHasher, get_password_hasher
from workout_tracker.kernel.models import User
from workout_tracker.kernel.store import RecordStore, normalize_email
from workout_tracker.logging_config import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@lru_cache
def _timing_hash(rounds: int) -> str:
    """A throwaway hash checked when the email is unknown, so both login failures cost the same."""
    return PasswordHasher(rounds=rounds).hash(secrets.token_urlsafe(16))


async def prime_timing_hash(hasher: PasswordHasher) -> str:
    """
    Build the throwaway hash for this cost in a worker thread.

    Called at startup so the first unknown-email login does a single
    bcrypt pass like every other failed login.
    """
    return await asyncio.to_thread(_timing_hash, hasher.rounds)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, authentication and password changes. bcrypt work
    runs in a worker thread so it does not stall other requests.
    """

    def __init__(
        self,
        store: RecordStore,
        hasher: Optional[PasswordHasher] = None,
        jwt_manager: Optional[JWTManager] = None,
    ):
        self.store = store
        self.hasher = hasher or get_password_hasher()
        self.jwt_manager = jwt_manager or get_jwt_manager()

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hasher.hash, password)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.hasher.verify, password, password_hash)

    async def register(self, email: str, password: str) -> IssuedToken:
        """
        Register a new user and issue a session token.

        The existence check only gives a friendly error; the unique
        constraint on users.email is what stops concurrent duplicates.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            IssuedToken for the new user

        Raises:
            ConflictError: If the email is already registered
        """
        email = normalize_email(email)
        if await self.store.email_exists(email):
            raise ConflictError("Email already registered")

        password_hash = await self._hash(password)
        try:
            user = await self.store.create_identity(email, password_hash)
        except UniqueViolationError as exc:
            logger.info("Registration lost a race on a duplicate email")
            raise ConflictError("Email already registered") from exc

        logger.info("User registered", extra={"user_id": str(user.id)})
        return self.jwt_manager.issue(user)

    async def login(self, email: str, password: str) -> IssuedToken:
        """
        Authenticate a user and issue a session token.

        Unknown email and wrong password fail the same way.

        Raises:
            UnauthorizedError: If the credentials do not match
        """
        user = await self.store.get_identity_by_email(email)
        if user is None:
            await self._verify(password, await prime_timing_hash(self.hasher))
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await self._verify(password, user.password_hash):
            logger.info("Failed login", extra={"user_id": str(user.id)})
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if self.hasher.needs_rehash(user.password_hash):
            await self.store.update_password_hash(user.id, await self._hash(password))
            logger.info("Password hash upgraded", extra={"user_id": str(user.id)})

        return self.jwt_manager.issue(user)

    async def change_password(self, identity_id: uuid.UUID, new_password: str) -> uuid.UUID:
        """
        Replace a user's password.

        Tokens issued before the change stay valid until they expire.

        Raises:
            NotFoundError: If the user does not exist
        """
        password_hash = await self._hash(new_password)
        if not await self.store.update_password_hash(identity_id, password_hash):
            raise NotFoundError("User not found")

        logger.info("Password changed", extra={"user_id": str(identity_id)})
        return identity_id

    async def get_identity(self, identity_id: uuid.UUID) -> User:
        user = await self.store.get_identity(identity_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def delete_identity(self, identity_id: uuid.UUID) -> uuid.UUID:
        """Delete a user together with all of its workouts and exercises."""
        if not await self.store.delete_identity(identity_id):
            raise NotFoundError("User not found")

        logger.info("User deleted", extra={"user_id": str(identity_id)})
        return identity_id

    async def authenticate_token(self, token: str) -> User:
        """
        Resolve a bearer token to its user.

        Raises:
            InvalidTokenError / ExpiredTokenError: If the token is rejected
            UnauthorizedError: If the token's user no longer exists
        """
        claims = self.jwt_manager.validate(token)
        user = await self.store.get_identity(claims.subject_id)
        if user is None:
            raise UnauthorizedError("User no longer exists")
        return user
