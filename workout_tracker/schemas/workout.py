"""
Workout and exercise schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkoutCreate(BaseModel):
    """Workout creation request."""

    name: str = Field(..., min_length=1, max_length=255)


class WorkoutUpdate(BaseModel):
    """Workout rename request."""

    name: str = Field(..., min_length=1, max_length=255)


class WorkoutResponse(BaseModel):
    """Workout response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    created_at: datetime


class ExerciseCreate(BaseModel):
    """Exercise creation request."""

    workout_id: uuid.UUID
    name: str = Field(..., min_length=1, max_length=255)
    sets: str = Field(..., min_length=1, max_length=50)


class ExerciseUpdate(BaseModel):
    """Exercise update request."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sets: Optional[str] = Field(None, min_length=1, max_length=50)


class ExerciseResponse(BaseModel):
    """Exercise response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    workout_id: uuid.UUID
    name: str
    sets: str
    created_at: datetime


class WorkoutListResponse(BaseModel):
    """All workouts and exercises of the current user."""

    workouts: List[WorkoutResponse]
    exercises: List[ExerciseResponse]
