"""
Identity Core - Authentication and user management.
"""

from workout_tracker.kernel.identity.password import PasswordHasher, get_password_hasher
from workout_tracker.kernel.identity.jwt import (
    IssuedToken,
    JWTManager,
    SessionClaims,
    get_jwt_manager,
)
from workout_tracker.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "get_password_hasher",
    "IssuedToken",
    "JWTManager",
    "SessionClaims",
    "get_jwt_manager",
    "IdentityService",
]
