"""
Endpoints for the authenticated user's own account.
"""

from fastapi import APIRouter, HTTPException, Response, status

from workout_tracker.api.deps import CurrentUser, Identity
from workout_tracker.kernel.errors import NotFoundError
from workout_tracker.schemas.auth import ChangePasswordRequest, UserResponse
from workout_tracker.schemas.common import SuccessResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(user: CurrentUser):
    """Get current user's profile."""
    return UserResponse.model_validate(user)


@router.put("/me/password", response_model=SuccessResponse)
async def change_password(
    data: ChangePasswordRequest,
    user: CurrentUser,
    identity_service: Identity,
):
    """
    Change the current user's password.

    Tokens issued earlier remain valid until they expire.
    """
    try:
        user_id = await identity_service.change_password(user.id, data.new_password)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return SuccessResponse(message="Password updated successfully", data={"id": str(user_id)})


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(user: CurrentUser, identity_service: Identity):
    """Delete the current user with all of its workouts and exercises."""
    try:
        await identity_service.delete_identity(user.id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return Response(status_code=status.HTTP_204_NO_CONTENT)
