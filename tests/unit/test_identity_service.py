"""Tests for IdentityService against a SQLite test database."""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select

from workout_tracker.kernel.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    VerificationError,
)
from workout_tracker.kernel.identity.identity_service import (
    IdentityService,
    _timing_hash,
    prime_timing_hash,
)
from workout_tracker.kernel.identity.password import PasswordHasher
from workout_tracker.kernel.models import Exercise, User, Workout


async def _count(session_maker, model, *where) -> int:
    """Count rows in a fresh session so earlier transactions are visible."""
    async with session_maker() as session:
        result = await session.execute(select(func.count()).select_from(model).where(*where))
        return result.scalar_one()


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_valid_token(self, identity_service, jwt_manager, db_session):
        token = await identity_service.register("new@example.com", "SecurePass123")
        await db_session.commit()

        claims = jwt_manager.validate(token.access_token)
        user = await identity_service.get_identity(claims.subject_id)
        assert claims.email == "new@example.com"
        assert user.email == "new@example.com"
        assert user.password_hash != "SecurePass123"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, identity_service, db_session, session_maker):
        await identity_service.register("dup@example.com", "SecurePass123")
        await db_session.commit()

        with pytest.raises(ConflictError):
            await identity_service.register("dup@example.com", "AnotherPass123")

        assert await _count(session_maker, User, User.email == "dup@example.com") == 1

    @pytest.mark.asyncio
    async def test_register_normalizes_email(self, identity_service, db_session):
        await identity_service.register("  Mixed.Case@Example.com ", "SecurePass123")
        await db_session.commit()

        with pytest.raises(ConflictError):
            await identity_service.register("mixed.case@example.com", "SecurePass123")

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_hits_unique_constraint(
        self, identity_service, store, db_session, session_maker, monkeypatch
    ):
        """If the advisory pre-check misses, the constraint still yields a conflict."""
        await identity_service.register("race@example.com", "SecurePass123")
        await db_session.commit()

        async def stale_check(email):
            return False

        monkeypatch.setattr(store, "email_exists", stale_check)

        with pytest.raises(ConflictError):
            await identity_service.register("race@example.com", "SecurePass123")

        assert await _count(session_maker, User, User.email == "race@example.com") == 1


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, identity_service, test_user, jwt_manager):
        token = await identity_service.login("testuser@example.com", "TestPassword123")

        claims = jwt_manager.validate(token.access_token)
        assert claims.subject_id == test_user.id
        assert claims.email == test_user.email

    @pytest.mark.asyncio
    async def test_login_is_case_insensitive_on_email(self, identity_service, test_user):
        token = await identity_service.login("TestUser@Example.com", "TestPassword123")
        assert token.access_token

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_fail_alike(self, identity_service, test_user):
        with pytest.raises(UnauthorizedError) as wrong_password:
            await identity_service.login("testuser@example.com", "WrongPassword1")
        with pytest.raises(UnauthorizedError) as unknown_email:
            await identity_service.login("nobody@example.com", "TestPassword123")

        assert str(wrong_password.value) == str(unknown_email.value)

    @pytest.mark.asyncio
    async def test_unknown_email_login_keeps_event_loop_responsive(self, store, jwt_manager):
        _timing_hash.cache_clear()
        service = IdentityService(store, hasher=PasswordHasher(rounds=12), jwt_manager=jwt_manager)
        loop = asyncio.get_running_loop()
        done = asyncio.Event()
        gaps = []

        async def ticker():
            while not done.is_set():
                started = loop.time()
                await asyncio.sleep(0.005)
                gaps.append(loop.time() - started)

        task = asyncio.create_task(ticker())
        try:
            with pytest.raises(UnauthorizedError):
                await service.login("nobody@example.com", "TestPassword123")
        finally:
            done.set()
            await task

        assert gaps
        assert max(gaps) < 0.1

    @pytest.mark.asyncio
    async def test_primed_timing_hash_is_reused(self, hasher):
        first = await prime_timing_hash(hasher)

        assert await prime_timing_hash(hasher) == first
        assert first.startswith("$2b$04$")

    @pytest.mark.asyncio
    async def test_corrupt_stored_hash_is_not_a_mismatch(self, identity_service, db_session):
        db_session.add(User(email="corrupt@example.com", password_hash="not-a-bcrypt-hash"))
        await db_session.commit()

        with pytest.raises(VerificationError):
            await identity_service.login("corrupt@example.com", "TestPassword123")

    @pytest.mark.asyncio
    async def test_login_upgrades_outdated_hash(self, identity_service, db_session, hasher):
        db_session.add(User(
            email="legacy@example.com",
            password_hash=PasswordHasher(rounds=5).hash("LegacyPass123"),
        ))
        await db_session.commit()

        await identity_service.login("legacy@example.com", "LegacyPass123")

        user = await identity_service.store.get_identity_by_email("legacy@example.com")
        await db_session.refresh(user)
        assert user.password_hash.startswith("$2b$04$")
        assert hasher.verify("LegacyPass123", user.password_hash)


class TestChangePassword:

    @pytest.mark.asyncio
    async def test_change_password(self, identity_service, test_user, jwt_manager, db_session):
        old_token = await identity_service.login("testuser@example.com", "TestPassword123")

        result = await identity_service.change_password(test_user.id, "BrandNewPass456")
        await db_session.commit()

        assert result == test_user.id
        with pytest.raises(UnauthorizedError):
            await identity_service.login("testuser@example.com", "TestPassword123")
        assert await identity_service.login("testuser@example.com", "BrandNewPass456")

        # Stateless tokens outlive the password they were issued under
        assert jwt_manager.validate(old_token.access_token).subject_id == test_user.id

    @pytest.mark.asyncio
    async def test_change_password_unknown_user(self, identity_service, schema):
        with pytest.raises(NotFoundError):
            await identity_service.change_password(uuid.uuid4(), "BrandNewPass456")


class TestDeleteAndTokens:

    @pytest.mark.asyncio
    async def test_delete_cascades(self, identity_service, store, test_user, db_session, session_maker):
        workout = await store.create_workout(test_user.id, "Push Day")
        await store.create_exercise(test_user.id, workout.id, "Bench Press", "4x8")
        await db_session.commit()

        await identity_service.delete_identity(test_user.id)
        await db_session.commit()

        assert await _count(session_maker, User, User.id == test_user.id) == 0
        assert await _count(session_maker, Workout, Workout.user_id == test_user.id) == 0
        assert await _count(session_maker, Exercise, Exercise.user_id == test_user.id) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, identity_service, schema):
        with pytest.raises(NotFoundError):
            await identity_service.delete_identity(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_authenticate_token(self, identity_service, test_user):
        token = await identity_service.login("testuser@example.com", "TestPassword123")

        user = await identity_service.authenticate_token(token.access_token)
        assert user.id == test_user.id

    @pytest.mark.asyncio
    async def test_token_of_deleted_user_is_rejected(self, identity_service, test_user, db_session):
        token = await identity_service.login("testuser@example.com", "TestPassword123")
        await identity_service.delete_identity(test_user.id)
        await db_session.commit()

        with pytest.raises(UnauthorizedError):
            await identity_service.authenticate_token(token.access_token)
