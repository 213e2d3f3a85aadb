"""
API v1 routes.
"""

from fastapi import APIRouter

from workout_tracker.api.v1 import auth, exercises, users, workouts

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(workouts.router, prefix="/workouts", tags=["Workouts"])
router.include_router(exercises.router, prefix="/exercises", tags=["Exercises"])
