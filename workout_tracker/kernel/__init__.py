"""
Kernel Layer

- Identity Core (password hashing, session tokens, registration and login)
- Record Store (users, workouts, exercises)
- Schema Provisioning (startup table creation and demo data)
"""

from workout_tracker.kernel.models import Exercise, User, Workout

__all__ = [
    "User",
    "Workout",
    "Exercise",
]
