"""
Kernel Data Models

SQLAlchemy models for users, workouts and exercises.
"""

from workout_tracker.kernel.models.base import Base, CreatedAtMixin, generate_uuid
from workout_tracker.kernel.models.user import User
from workout_tracker.kernel.models.workout import Exercise, Workout

__all__ = [
    "Base",
    "CreatedAtMixin",
    "generate_uuid",
    "User",
    "Workout",
    "Exercise",
]
