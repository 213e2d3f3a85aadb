"""
Workout Tracker API

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from workout_tracker.api.middleware.request_context import RequestContextMiddleware
from workout_tracker.api.v1 import router as api_v1_router
from workout_tracker.config import get_settings
from workout_tracker.database import close_db, engine
from workout_tracker.kernel.errors import StoreTimeoutError
from workout_tracker.kernel.identity import get_password_hasher
from workout_tracker.kernel.identity.identity_service import prime_timing_hash
from workout_tracker.kernel.provisioning import provision_schema
from workout_tracker.logging_config import configure_logging, get_logger
from workout_tracker.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Provisioning must finish (successfully or degraded) before the first
    request is served.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    app.state.schema_report = await provision_schema(engine)
    await prime_timing_hash(get_password_hasher())
    logger.info("Database ready")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Workout Tracker API

    Backend for a fitness-tracking client.

    ## Features

    - **Accounts**: Registration, login, password change and account deletion
    - **Workouts**: Named workout plans per user
    - **Exercises**: Exercises with set descriptions inside each workout

    Protected endpoints take a bearer session token returned by
    `/auth/register` or `/auth/login`. Tokens are stateless and stay valid
    until they expire.
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(RequestContextMiddleware)


def _request_id_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Attach the request ID to 4xx/5xx responses."""
    headers = {**(exc.headers or {}), **_request_id_headers(request)}
    content = {"detail": exc.detail}
    req_id = getattr(request.state, "request_id", None)
    if req_id and exc.status_code >= 500:
        content["request_id"] = req_id
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {"detail": "Validation error", "errors": errors}
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        content["request_id"] = req_id
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_request_id_headers(request),
    )


@app.exception_handler(StoreTimeoutError)
async def store_timeout_handler(request: Request, exc: StoreTimeoutError):
    """The database did not answer in time."""
    logger.error("Request aborted: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Service temporarily unavailable",
            "request_id": getattr(request.state, "request_id", None),
        },
        headers=_request_id_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions without leaking internals."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_request_id_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Check application health, including how the schema was provisioned."""
    report = getattr(request.app.state, "schema_report", None)
    schema_state = report.as_dict() if report is not None else {"provisioned": False}
    return HealthResponse(
        status="degraded" if report is not None and report.degraded else "ok",
        version=settings.version,
        schema_state=schema_state,
    )


@app.get("/", tags=["Root"])
async def root():
    """Welcome message."""
    return {
        "message": "Welcome to the Workout App API!",
        "name": settings.project_name,
        "version": settings.version,
        "api": {
            "v1": settings.api_v1_prefix,
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "workout_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
