"""
Conduit API

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conduit.api.deps import get_request_id
from conduit.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from conduit.api.v1 import router as api_router
from conduit.config import get_settings
from conduit.database import close_db, init_db
from conduit.kernel.errors import ConduitError, InternalError, UnauthorizedError, UnprocessableEntityError
from conduit.kernel.identity.context import SCHEME
from conduit.kernel.identity.password import shutdown_credential_verifier
from conduit.logging_config import configure_logging, get_logger
from conduit.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    shutdown_credential_verifier()
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Conduit: the RealWorld content-sharing API.

    ## Features

    - **Users**: registration, login, profile updates
    - **Profiles**: follow and unfollow authors
    - **Articles**: publish, edit, delete, favorite, tag and list
    - **Comments**: discuss articles

    Every ownership-gated write reports exactly one of success, 403 or 404.
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# add_middleware stacks innermost-first, so CORS (added last) wraps everything
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _headers(request: Request) -> Dict[str, str]:
    req_id = get_request_id(request)
    return {REQUEST_ID_HEADER: req_id} if req_id else {}


def _field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        names = [str(loc) for loc in error["loc"] if isinstance(loc, str)]
        field = names[-1] if names else "body"
        errors.setdefault(field, []).append(error["msg"])
    return errors


@app.exception_handler(ConduitError)
async def conduit_exception_handler(request: Request, exc: ConduitError):
    """Render domain errors with their status code."""
    headers = _headers(request)
    if isinstance(exc, UnprocessableEntityError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"errors": exc.errors},
            headers=headers,
        )
    if isinstance(exc, InternalError):
        logger.error("Internal error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": InternalError.detail, "request_id": get_request_id(request)},
            headers=headers,
        )
    if isinstance(exc, UnauthorizedError):
        headers["WWW-Authenticate"] = SCHEME
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors in the RealWorld error shape."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"errors": _field_errors(exc)},
        headers=_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions without leaking details."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = get_request_id(request)
    if settings.debug:
        content = {"detail": str(exc), "type": type(exc).__name__, "request_id": req_id}
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(status="ok", version=settings.version, database="connected")


app.include_router(api_router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "conduit.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
