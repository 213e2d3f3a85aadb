"""
Workout and exercise models.
"""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workout_tracker.kernel.models.base import Base, CreatedAtMixin, generate_uuid

if TYPE_CHECKING:
    from workout_tracker.kernel.models.user import User


class Workout(Base, CreatedAtMixin):
    """A named workout plan owned by one user."""

    __tablename__ = "workouts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    owner: Mapped["User"] = relationship("User", back_populates="workouts")
    exercises: Mapped[List["Exercise"]] = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Workout {self.name}>"


class Exercise(Base, CreatedAtMixin):
    """An exercise entry inside a workout plan."""

    __tablename__ = "exercises"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    workout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("workouts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    # Free-text set description, e.g. "3x10" or "5 sets of 5 @ 80kg"
    sets: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    owner: Mapped["User"] = relationship("User", back_populates="exercises")
    workout: Mapped["Workout"] = relationship("Workout", back_populates="exercises")

    def __repr__(self) -> str:
        return f"<Exercise {self.name} ({self.sets})>"
