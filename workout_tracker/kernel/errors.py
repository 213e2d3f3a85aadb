"""
Error taxonomy for the identity, provisioning and storage layers.

Routers translate these into HTTP responses; nothing below the API layer
knows about status codes.
"""

from typing import Optional


class WorkoutTrackerError(Exception):
    """Base class for all application errors."""


class ConflictError(WorkoutTrackerError):
    """A unique key (e.g. an email address) is already taken."""


class UnauthorizedError(WorkoutTrackerError):
    """Credentials or token did not identify a known user."""


class NotFoundError(WorkoutTrackerError):
    """The requested record does not exist or is not owned by the caller."""


# Tokens

class TokenError(WorkoutTrackerError):
    """Base class for session token validation failures."""


class InvalidTokenError(TokenError):
    """Malformed, unsigned, tampered, or signed with the wrong algorithm."""


class ExpiredTokenError(TokenError):
    """Signature is valid but the token is past its expiry."""


# Credentials

class CredentialError(WorkoutTrackerError):
    """Failure of the password hashing primitive."""


class HashingError(CredentialError):
    pass


class VerificationError(CredentialError):
    """The stored hash is malformed and cannot be checked."""


# Provisioning

class ProvisioningError(WorkoutTrackerError):
    """A schema check, create or seed step failed."""

    def __init__(self, relation: str, step: str, cause: Optional[BaseException] = None):
        self.relation = relation
        self.step = step
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{step} failed for relation '{relation}'{detail}")


# Record store

class StoreError(WorkoutTrackerError):
    """Base class for record store failures."""


class StoreTimeoutError(StoreError):
    """A store call exceeded its time budget."""


class ConstraintViolationError(StoreError):
    """The store rejected a write because of a constraint."""


class UniqueViolationError(ConstraintViolationError):
    pass


class ForeignKeyViolationError(ConstraintViolationError):
    pass
