"""
Record store - persistence for identities, workouts and exercises.
"""

from workout_tracker.kernel.store.record_store import (
    RecordStore,
    classify_integrity_error,
    normalize_email,
)

__all__ = [
    "RecordStore",
    "classify_integrity_error",
    "normalize_email",
]
