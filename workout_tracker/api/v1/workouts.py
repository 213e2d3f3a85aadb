"""
Workout endpoints.
"""

import uuid

from fastapi import APIRouter, HTTPException, Response, status

from workout_tracker.api.deps import CurrentUser, Store
from workout_tracker.logging_config import get_logger
from workout_tracker.schemas.workout import (
    ExerciseResponse,
    WorkoutCreate,
    WorkoutListResponse,
    WorkoutResponse,
    WorkoutUpdate,
)

logger = get_logger(__name__)

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")


@router.get("", response_model=WorkoutListResponse)
async def list_workouts(user: CurrentUser, store: Store):
    """List the user's workouts together with all of their exercises."""
    workouts = await store.list_workouts(user.id)
    exercises = await store.list_exercises(user.id)
    return WorkoutListResponse(
        workouts=[WorkoutResponse.model_validate(w) for w in workouts],
        exercises=[ExerciseResponse.model_validate(e) for e in exercises],
    )


@router.post("", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
async def create_workout(data: WorkoutCreate, user: CurrentUser, store: Store):
    """Create a workout."""
    workout = await store.create_workout(user.id, data.name)
    logger.info("Workout created", extra={"workout_id": str(workout.id)})
    return WorkoutResponse.model_validate(workout)


@router.put("/{workout_id}", response_model=WorkoutResponse)
async def rename_workout(
    workout_id: uuid.UUID,
    data: WorkoutUpdate,
    user: CurrentUser,
    store: Store,
):
    """Rename a workout."""
    workout = await store.rename_workout(workout_id, user.id, data.name)
    if workout is None:
        raise _not_found()
    return WorkoutResponse.model_validate(workout)


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(workout_id: uuid.UUID, user: CurrentUser, store: Store):
    """Delete a workout and its exercises."""
    if not await store.delete_workout(workout_id, user.id):
        raise _not_found()
    logger.info("Workout deleted", extra={"workout_id": str(workout_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
