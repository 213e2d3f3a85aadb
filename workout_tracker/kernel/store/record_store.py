"""
Record store: parameterized CRUD over users, workouts and exercises.

Every call is bounded by a timeout so a stalled database cannot hold a
request forever. Constraint violations come back as typed errors instead
of raw driver exceptions.
"""

import asyncio
import uuid
from typing import Awaitable, List, Optional, TypeVar

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.config import get_settings
from workout_tracker.kernel.errors import (
    ConstraintViolationError,
    ForeignKeyViolationError,
    StoreTimeoutError,
    UniqueViolationError,
)
from workout_tracker.kernel.models import Exercise, User, Workout
from workout_tracker.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# SQLSTATE codes reported by PostgreSQL drivers
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def normalize_email(email: str) -> str:
    """Emails are stored and compared lower-cased and stripped."""
    return email.lower().strip()


def classify_integrity_error(exc: IntegrityError) -> ConstraintViolationError:
    """
    Map a driver IntegrityError onto the store's error types.

    PostgreSQL drivers expose a SQLSTATE; SQLite only gives a message.
    """
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    message = str(orig).lower()

    if code == _UNIQUE_VIOLATION or "unique" in message:
        return UniqueViolationError(message)
    if code == _FOREIGN_KEY_VIOLATION or "foreign key" in message:
        return ForeignKeyViolationError(message)
    return ConstraintViolationError(message)


class RecordStore:
    """
    Storage operations for one request-scoped session.

    Usage:
        store = RecordStore(session)
        user = await store.get_identity_by_email("someone@example.com")
    """

    def __init__(self, session: AsyncSession, timeout_seconds: Optional[float] = None):
        self.session = session
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else get_settings().db_statement_timeout_seconds
        )

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.error("Store call timed out after %.1fs", self.timeout_seconds)
            raise StoreTimeoutError("Database call timed out") from exc

    async def _write(self, *rows) -> None:
        """Flush pending rows, translating constraint failures."""
        for row in rows:
            self.session.add(row)
        try:
            await self._bounded(self.session.flush())
        except IntegrityError as exc:
            await self.session.rollback()
            raise classify_integrity_error(exc) from exc
        for row in rows:
            await self._bounded(self.session.refresh(row))

    async def _execute_rowcount(self, statement) -> int:
        try:
            result = await self._bounded(self.session.execute(statement))
        except IntegrityError as exc:
            await self.session.rollback()
            raise classify_integrity_error(exc) from exc
        return result.rowcount

    # Identities

    async def email_exists(self, email: str) -> bool:
        query = select(exists().where(User.email == normalize_email(email)))
        result = await self._bounded(self.session.execute(query))
        return bool(result.scalar())

    async def get_identity(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        query = select(User).where(User.id == user_id)
        result = await self._bounded(self.session.execute(query))
        return result.scalar_one_or_none()

    async def get_identity_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == normalize_email(email))
        result = await self._bounded(self.session.execute(query))
        return result.scalar_one_or_none()

    async def create_identity(self, email: str, password_hash: str) -> User:
        """
        Insert a new user.

        Raises:
            UniqueViolationError: If the email is already taken
        """
        user = User(email=normalize_email(email), password_hash=password_hash)
        await self._write(user)
        return user

    async def update_password_hash(self, user_id: uuid.UUID, password_hash: str) -> bool:
        user = await self.get_identity(user_id)
        if user is None:
            return False
        user.password_hash = password_hash
        await self._write(user)
        return True

    async def delete_identity(self, user_id: uuid.UUID) -> bool:
        """Delete a user; the database cascades to its workouts and exercises."""
        statement = delete(User).where(User.id == user_id)
        return await self._execute_rowcount(statement) > 0

    # Workouts

    async def list_workouts(self, user_id: uuid.UUID) -> List[Workout]:
        query = (
            select(Workout)
            .where(Workout.user_id == user_id)
            .order_by(Workout.created_at, Workout.name)
        )
        result = await self._bounded(self.session.execute(query))
        return list(result.scalars().all())

    async def get_workout(self, workout_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Workout]:
        """Get a workout if it exists and belongs to the user."""
        query = select(Workout).where(
            Workout.id == workout_id,
            Workout.user_id == user_id,
        )
        result = await self._bounded(self.session.execute(query))
        return result.scalar_one_or_none()

    async def create_workout(self, user_id: uuid.UUID, name: str) -> Workout:
        workout = Workout(user_id=user_id, name=name)
        await self._write(workout)
        return workout

    async def rename_workout(
        self,
        workout_id: uuid.UUID,
        user_id: uuid.UUID,
        name: str,
    ) -> Optional[Workout]:
        workout = await self.get_workout(workout_id, user_id)
        if workout is None:
            return None
        workout.name = name
        await self._write(workout)
        return workout

    async def delete_workout(self, workout_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        statement = delete(Workout).where(
            Workout.id == workout_id,
            Workout.user_id == user_id,
        )
        return await self._execute_rowcount(statement) > 0

    # Exercises

    async def list_exercises(self, user_id: uuid.UUID) -> List[Exercise]:
        query = (
            select(Exercise)
            .where(Exercise.user_id == user_id)
            .order_by(Exercise.created_at, Exercise.name)
        )
        result = await self._bounded(self.session.execute(query))
        return list(result.scalars().all())

    async def get_exercise(self, exercise_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Exercise]:
        query = select(Exercise).where(
            Exercise.id == exercise_id,
            Exercise.user_id == user_id,
        )
        result = await self._bounded(self.session.execute(query))
        return result.scalar_one_or_none()

    async def create_exercise(
        self,
        user_id: uuid.UUID,
        workout_id: uuid.UUID,
        name: str,
        sets: str,
    ) -> Exercise:
        """
        Insert an exercise into a workout.

        Raises:
            ForeignKeyViolationError: If the workout does not exist
        """
        exercise = Exercise(user_id=user_id, workout_id=workout_id, name=name, sets=sets)
        await self._write(exercise)
        return exercise

    async def update_exercise(
        self,
        exercise_id: uuid.UUID,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        sets: Optional[str] = None,
    ) -> Optional[Exercise]:
        exercise = await self.get_exercise(exercise_id, user_id)
        if exercise is None:
            return None
        if name is not None:
            exercise.name = name
        if sets is not None:
            exercise.sets = sets
        await self._write(exercise)
        return exercise

    async def delete_exercise(self, exercise_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        statement = delete(Exercise).where(
            Exercise.id == exercise_id,
            Exercise.user_id == user_id,
        )
        return await self._execute_rowcount(statement) > 0
