"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.helpers.envelope import error_response
from api.routers import auth, boards, cards, columns, health
from core.config import get_settings
from core.redis import RedisClient
from core.session_cache import SessionCache, set_session_cache
from services.exceptions import ResourceForbiddenError, ResourceNotFoundError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()

    # Startup: Connect to Redis
    redis_client = RedisClient(
        url=app_settings.redis_url,
        enabled=app_settings.redis_enabled,
        pool_size=app_settings.redis_pool_size,
    )
    await redis_client.connect()

    # Startup: Initialize session cache
    set_session_cache(SessionCache(redis_client))

    yield

    # Shutdown: Clean up session cache and Redis
    set_session_cache(None)
    await redis_client.close()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # HSTS: enforce HTTPS for 1 year, including subdomains
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


class InternalErrorMiddleware(BaseHTTPMiddleware):
    """
    Convert any unhandled exception into a 500 envelope.

    Full context is logged server-side; the response only carries the error
    detail when debug is enabled.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Run the request, catching anything the exception handlers did not."""
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled error processing %s %s", request.method, request.url.path,
            )
            extra = {"error": str(e)} if get_settings().debug else {}
            return error_response(500, "Internal server error", **extra)


app_settings = get_settings()

app = FastAPI(
    title="Task Board API",
    description="Multi-user task boards with columns, cards, and labels, behind Google sign-in.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    _request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    """Render HTTP errors (401, 404 for unknown routes, ...) in the envelope."""
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Malformed or missing input is a 400 with the field errors attached."""
    return error_response(
        400,
        "Validation failed",
        errors=jsonable_encoder(exc.errors(), exclude={"ctx", "input", "url"}),
    )


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(
    _request: Request, exc: ResourceNotFoundError,
) -> JSONResponse:
    """Unknown board, column, or card id."""
    return error_response(404, str(exc))


@app.exception_handler(ResourceForbiddenError)
async def forbidden_handler(
    request: Request, exc: ResourceForbiddenError,
) -> JSONResponse:
    """Existing resource owned by a different user."""
    logger.warning(
        "Forbidden access to %s id=%s by user_id=%s",
        exc.resource,
        exc.resource_id,
        getattr(request.state, "user_id", None),
    )
    return error_response(403, str(exc))


# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Outermost: anything that escapes the handlers above becomes a 500 envelope
app.add_middleware(InternalErrorMiddleware)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(boards.router)
app.include_router(columns.router)
app.include_router(cards.router)
