"""
Logging setup for the workout tracker API.

Every record is stamped with the current request id and, once the bearer
token has been resolved, the id of the authenticated user. Production
output is one JSON object per line; development output is plain text.

Usage:
    from workout_tracker.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Workout created", extra={"workout_id": str(workout.id)})
"""

import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

# extra= keys that make it into JSON output; anything else stays out
LOG_FIELDS = (
    "user_id",
    "workout_id",
    "exercise_id",
    "demo_email",
    "workouts",
    "exercises",
    "schema",
    "method",
    "route",
    "status_code",
    "duration_ms",
)


def bind_user(user_id: Optional[str]) -> None:
    """Attach the authenticated user to every later log record of this request."""
    user_id_var.set(user_id)


class RequestContextFilter(logging.Filter):
    """Stamp request_id and user_id from the request context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        if getattr(record, "user_id", None) is None:
            record.user_id = user_id_var.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, limited to the known service fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            entry["request_id"] = request_id

        for key in LOG_FIELDS:
            value = getattr(record, key, None)
            if value is None or value == "-":
                continue
            entry[key] = value if isinstance(value, (str, int, float, bool, dict, list)) else str(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' selects JSON output
        debug: If True, use DEBUG level regardless of log_level
    """
    level = "DEBUG" if debug else log_level.upper()
    formatter = "json" if environment == "production" else "text"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {"()": RequestContextFilter},
        },
        "formatters": {
            "json": {"()": JsonFormatter},
            "text": {
                "format": "%(asctime)s %(levelname)-5s [%(name)s] "
                          "req=%(request_id)s user=%(user_id)s %(message)s",
                "datefmt": "%H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "filters": ["request_context"],
                "formatter": formatter,
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    })


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
