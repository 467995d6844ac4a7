"""FastAPI application factory.

create_app() returns a configured FastAPI instance. The lifespan owns
the process-wide resources: the Database lifecycle object and the
optional Redis connection used for rate limiting.

Every error leaves the app as {"success": false, "error": "..."}.
Raw exception text is added as `details` only in development.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bizdir import __version__
from bizdir.api import api_router
from bizdir.config import settings
from bizdir.db.engine import database
from bizdir.db.redis_pool import close_redis, init_redis
from bizdir.errors import AppError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "bizdir.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    await database.connect()

    try:
        await init_redis()
        logger.info("bizdir.redis_connected")
    except Exception as e:
        # Redis only backs rate limiting; run without it
        logger.warning("bizdir.redis_unavailable", error=str(e))

    yield

    logger.info("bizdir.shutdown")
    await close_redis()
    await database.dispose()


# ─── Exception handlers ─────────────────────────────────


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
        headers=exc.headers,
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    content = {"success": False, "error": "Invalid request"}
    if settings.expose_error_details:
        content["details"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=400, content=content)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.failed", path=request.url.path)
    content = {"success": False, "error": "Internal server error"}
    if settings.expose_error_details:
        content["details"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="bizdir",
        description="Local business directory: public listings, back-office, field portals",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from bizdir.middleware.rate_limit import RateLimitMiddleware
    from bizdir.middleware.request_id import RequestIdMiddleware
    from bizdir.middleware.security import SecurityHeadersMiddleware

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

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: bizdir.main:app)
app = create_app()
