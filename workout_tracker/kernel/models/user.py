"""
User model for identity management.
"""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workout_tracker.kernel.models.base import Base, CreatedAtMixin, generate_uuid

if TYPE_CHECKING:
    from workout_tracker.kernel.models.workout import Exercise, Workout


class User(Base, CreatedAtMixin):
    """
    A registered identity.

    Workouts and exercises reference this row with ON DELETE CASCADE, so
    deleting a user removes everything it owns in the same statement.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # The database performs the cascade; the ORM must not try to null out FKs
    workouts: Mapped[List["Workout"]] = relationship(
        "Workout",
        back_populates="owner",
        cascade="all, delete",
        passive_deletes=True,
    )
    exercises: Mapped[List["Exercise"]] = relationship(
        "Exercise",
        back_populates="owner",
        cascade="all, delete",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
