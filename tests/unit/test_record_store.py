"""Tests for the record store."""

import asyncio
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from workout_tracker.kernel.errors import (
    ConstraintViolationError,
    ForeignKeyViolationError,
    StoreTimeoutError,
    UniqueViolationError,
)
from workout_tracker.kernel.store import RecordStore, classify_integrity_error


class _DriverError(Exception):
    def __init__(self, message: str, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


class TestClassifyIntegrityError:

    @pytest.mark.parametrize(
        "orig, expected",
        [
            (_DriverError("duplicate key value", sqlstate="23505"), UniqueViolationError),
            (_DriverError("violates constraint", sqlstate="23503"), ForeignKeyViolationError),
            (_DriverError("UNIQUE constraint failed: users.email"), UniqueViolationError),
            (_DriverError("FOREIGN KEY constraint failed"), ForeignKeyViolationError),
        ],
    )
    def test_known_violations(self, orig, expected):
        error = classify_integrity_error(IntegrityError("INSERT ...", {}, orig))
        assert isinstance(error, expected)

    def test_other_violation(self):
        error = classify_integrity_error(
            IntegrityError("INSERT ...", {}, _DriverError("NOT NULL constraint failed: users.email"))
        )
        assert type(error) is ConstraintViolationError


class TestIdentities:

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, store):
        user = await store.create_identity(" Someone@Example.com", "hash")

        assert user.email == "someone@example.com"
        assert user.created_at is not None
        assert await store.email_exists("SOMEONE@example.com") is True
        assert (await store.get_identity_by_email("someone@example.com")).id == user.id
        assert (await store.get_identity(user.id)).email == user.email

    @pytest.mark.asyncio
    async def test_duplicate_email_is_unique_violation(self, store):
        await store.create_identity("someone@example.com", "hash")

        with pytest.raises(UniqueViolationError):
            await store.create_identity("someone@example.com", "other-hash")

    @pytest.mark.asyncio
    async def test_missing_identity(self, store):
        assert await store.email_exists("nobody@example.com") is False
        assert await store.get_identity(uuid.uuid4()) is None
        assert await store.update_password_hash(uuid.uuid4(), "hash") is False
        assert await store.delete_identity(uuid.uuid4()) is False

    @pytest.mark.asyncio
    async def test_update_password_hash(self, store, test_user):
        assert await store.update_password_hash(test_user.id, "new-hash") is True

        user = await store.get_identity(test_user.id)
        assert user.password_hash == "new-hash"


class TestWorkoutsAndExercises:

    @pytest.mark.asyncio
    async def test_workout_lifecycle(self, store, test_user):
        workout = await store.create_workout(test_user.id, "Push Day")
        renamed = await store.rename_workout(workout.id, test_user.id, "Chest Day")

        assert renamed.name == "Chest Day"
        assert [w.id for w in await store.list_workouts(test_user.id)] == [workout.id]
        assert await store.delete_workout(workout.id, test_user.id) is True
        assert await store.list_workouts(test_user.id) == []

    @pytest.mark.asyncio
    async def test_exercise_lifecycle(self, store, test_user):
        workout = await store.create_workout(test_user.id, "Leg Day")
        exercise = await store.create_exercise(test_user.id, workout.id, "Back Squat", "5x5")

        updated = await store.update_exercise(exercise.id, test_user.id, sets="3x8")
        assert updated.name == "Back Squat"
        assert updated.sets == "3x8"

        listed = await store.list_exercises(test_user.id)
        assert [e.workout_id for e in listed] == [workout.id]

        assert await store.delete_exercise(exercise.id, test_user.id) is True
        assert await store.get_exercise(exercise.id, test_user.id) is None

    @pytest.mark.asyncio
    async def test_exercise_needs_existing_workout(self, store, test_user):
        with pytest.raises(ForeignKeyViolationError):
            await store.create_exercise(test_user.id, uuid.uuid4(), "Plank", "3x60s")

    @pytest.mark.asyncio
    async def test_records_are_scoped_to_owner(self, store, test_user):
        other = await store.create_identity("other@example.com", "hash")
        workout = await store.create_workout(test_user.id, "Pull Day")
        exercise = await store.create_exercise(test_user.id, workout.id, "Deadlift", "3x5")

        assert await store.get_workout(workout.id, other.id) is None
        assert await store.rename_workout(workout.id, other.id, "Mine now") is None
        assert await store.delete_workout(workout.id, other.id) is False
        assert await store.update_exercise(exercise.id, other.id, name="Mine now") is None
        assert await store.delete_exercise(exercise.id, other.id) is False
        assert await store.list_workouts(other.id) == []

    @pytest.mark.asyncio
    async def test_deleting_workout_cascades_to_exercises(self, store, test_user):
        workout = await store.create_workout(test_user.id, "Upper Body")
        await store.create_exercise(test_user.id, workout.id, "Chin-Up", "3x8")

        await store.delete_workout(workout.id, test_user.id)

        assert await store.list_exercises(test_user.id) == []


class TestTimeout:

    @pytest.mark.asyncio
    async def test_slow_call_raises_timeout(self, db_session):
        store = RecordStore(db_session, timeout_seconds=0.01)

        with pytest.raises(StoreTimeoutError):
            await store._bounded(asyncio.sleep(1))

    def test_default_timeout_comes_from_settings(self, db_session):
        assert RecordStore(db_session).timeout_seconds == 10.0
