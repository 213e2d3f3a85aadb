"""
Pydantic schemas for API request/response validation.
"""

from workout_tracker.schemas.auth import (
    ChangePasswordRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from workout_tracker.schemas.workout import (
    ExerciseCreate,
    ExerciseResponse,
    ExerciseUpdate,
    WorkoutCreate,
    WorkoutListResponse,
    WorkoutResponse,
    WorkoutUpdate,
)
from workout_tracker.schemas.common import ErrorResponse, HealthResponse, SuccessResponse

__all__ = [
    "ChangePasswordRequest",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "ExerciseCreate",
    "ExerciseResponse",
    "ExerciseUpdate",
    "WorkoutCreate",
    "WorkoutListResponse",
    "WorkoutResponse",
    "WorkoutUpdate",
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
]
