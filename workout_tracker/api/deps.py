"""
FastAPI dependencies for authentication and database sessions.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.database import get_db
from workout_tracker.kernel.errors import ExpiredTokenError, InvalidTokenError, UnauthorizedError
from workout_tracker.kernel.identity.identity_service import IdentityService
from workout_tracker.kernel.models import User
from workout_tracker.kernel.store import RecordStore
from workout_tracker.logging_config import bind_user, get_logger

logger = get_logger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_record_store(db: DbSession) -> RecordStore:
    """Record store bound to the request's session."""
    return RecordStore(db)


Store = Annotated[RecordStore, Depends(get_record_store)]


def get_identity_service(store: Store) -> IdentityService:
    return IdentityService(store)


Identity = Annotated[IdentityService, Depends(get_identity_service)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    identity_service: Identity,
) -> User:
    """
    Get current authenticated user or raise 401.

    Expired and invalid tokens get the same response; the reason is only logged.
    The resolved user is bound to the request's logging context.
    """
    if not credentials:
        raise _unauthorized("Not authenticated")

    try:
        user = await identity_service.authenticate_token(credentials.credentials)
    except ExpiredTokenError:
        logger.info("Rejected expired token")
    except InvalidTokenError as exc:
        logger.info("Rejected invalid token: %s", exc)
    except UnauthorizedError:
        logger.info("Rejected token for a deleted user")
    else:
        request.state.user_id = str(user.id)
        bind_user(request.state.user_id)
        return user

    raise _unauthorized("Invalid or expired token")


CurrentUser = Annotated[User, Depends(get_current_user)]
