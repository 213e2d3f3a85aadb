"""
Authentication endpoints.
"""

from fastapi import APIRouter, HTTPException, status

from workout_tracker.api.deps import Identity
from workout_tracker.kernel.errors import ConflictError, UnauthorizedError
from workout_tracker.kernel.identity.jwt import IssuedToken
from workout_tracker.schemas.auth import TokenResponse, UserCreate, UserLogin
from workout_tracker.schemas.common import ErrorResponse

router = APIRouter()


def _token_response(token: IssuedToken) -> TokenResponse:
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        expires_at=token.expires_at,
    )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def register(data: UserCreate, identity_service: Identity):
    """
    Register a new user account.

    Returns a session token on successful registration.
    """
    try:
        token = await identity_service.register(email=data.email, password=data.password)
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )

    return _token_response(token)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(data: UserLogin, identity_service: Identity):
    """Authenticate user and return a session token."""
    try:
        token = await identity_service.login(email=data.email, password=data.password)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    return _token_response(token)
