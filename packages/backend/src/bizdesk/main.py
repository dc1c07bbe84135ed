"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis pool, database
engine). Middleware, CORS, exception handlers and routers are all
registered here.

Every failure leaves the API in one shape:

    {"success": false, "message": "..."}          (+ "errors" on 422)

AuthError subclasses carry their own status (401/403/503); route-level
HTTPExceptions keep theirs; anything unexpected becomes a 500 with a
generic message, the details going only to the log.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bizdesk import __version__
from bizdesk.api import api_router
from bizdesk.auth.errors import AuthError
from bizdesk.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    logger.info(
        "bizdesk.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        revocation_enabled=settings.revocation_enabled,
    )

    from bizdesk.cache.client import close_redis, init_redis
    try:
        await init_redis()
        logger.info("bizdesk.redis_connected", url=settings.redis_url)
    except (RedisError, OSError) as e:
        # Redis is optional: no rate limiting, per-process deny-list.
        logger.warning("bizdesk.redis_unavailable", error=str(e))

    yield

    logger.info("bizdesk.shutdown")
    await close_redis()

    from bizdesk.db.engine import engine
    await engine.dispose()


# ─── Error rendering ────────────────────────────────────


def _failure(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return _failure(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _failure(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _failure(
        422,
        "Validation failed",
        errors=jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("bizdesk.unhandled_error", path=request.url.path)
    return _failure(500, "Internal server error")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="BizDesk",
        description="Multi-tenant business management API — CRM, projects, HR, finance",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from bizdesk.middleware.rate_limit import RateLimitMiddleware
    from bizdesk.middleware.request_id import RequestIdMiddleware
    from bizdesk.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ────────────────────────────────────
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: bizdesk.main:app)
app = create_app()
