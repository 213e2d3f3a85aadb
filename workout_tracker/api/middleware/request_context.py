"""
Per-request logging context.

Accepts or generates the X-Request-ID header, exposes it to log records and
error handlers, and reports slow requests with the matched route and the
authenticated user.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from workout_tracker.logging_config import get_logger, request_id_var, user_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


def _route_template(request: Request) -> str:
    """'/api/v1/workouts/{workout_id}' rather than the concrete path."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request id (and later user id) for everything logged during a request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        request_token = request_id_var.set(request_id)
        user_token = user_id_var.set(None)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            user_id_var.reset(user_token)
            request_id_var.reset(request_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        if duration_ms > SLOW_REQUEST_MS:
            logger.warning(
                "Slow request",
                extra={
                    "method": request.method,
                    "route": _route_template(request),
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "user_id": getattr(request.state, "user_id", None),
                },
            )
        return response
