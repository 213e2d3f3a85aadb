"""
Exercise endpoints.
"""

import uuid

from fastapi import APIRouter, HTTPException, Response, status

from workout_tracker.api.deps import CurrentUser, Store
from workout_tracker.kernel.errors import ForeignKeyViolationError
from workout_tracker.logging_config import get_logger
from workout_tracker.schemas.workout import ExerciseCreate, ExerciseResponse, ExerciseUpdate

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=ExerciseResponse, status_code=status.HTTP_201_CREATED)
async def create_exercise(data: ExerciseCreate, user: CurrentUser, store: Store):
    """Add an exercise to one of the user's workouts."""
    if await store.get_workout(data.workout_id, user.id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")

    try:
        exercise = await store.create_exercise(user.id, data.workout_id, data.name, data.sets)
    except ForeignKeyViolationError:
        # Workout deleted between the check and the insert
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout not found")

    logger.info(
        "Exercise added",
        extra={"workout_id": str(data.workout_id), "exercise_id": str(exercise.id)},
    )
    return ExerciseResponse.model_validate(exercise)


@router.put("/{exercise_id}", response_model=ExerciseResponse)
async def update_exercise(
    exercise_id: uuid.UUID,
    data: ExerciseUpdate,
    user: CurrentUser,
    store: Store,
):
    """Update an exercise's name and/or sets."""
    exercise = await store.update_exercise(exercise_id, user.id, name=data.name, sets=data.sets)
    if exercise is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    return ExerciseResponse.model_validate(exercise)


@router.delete("/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exercise(exercise_id: uuid.UUID, user: CurrentUser, store: Store):
    """Delete an exercise."""
    if not await store.delete_exercise(exercise_id, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    logger.info("Exercise deleted", extra={"exercise_id": str(exercise_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
