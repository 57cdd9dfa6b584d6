import logging
import sys
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.dtos import HealthCheckResponse
from api.shared.exceptions import AppException, InternalError, ValidationError
from core.logger import configure_logging
from core.settings import SETTINGS
from di.container import ApplicationContainer as DependencyContainer

configure_logging(level=SETTINGS.APP.LOG_LEVEL, json_logs=SETTINGS.APP.JSON_LOGS)

logger = structlog.get_logger("contentgen")


class CustomFastAPI(FastAPI):
    container: DependencyContainer


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("Starting application initialization...")
    start_time = time.time()

    try:
        logger.info("Initializing database connection...")
        db_start = time.time()
        db_resource = _app.container.infrastructure.database()
        await db_resource.init()
        async with db_resource.engine.begin() as _conn:
            # Verify database connection
            await _conn.execute(text("SELECT 1"))
        logger.info(
            "Database connection established",
            elapsed=f"{time.time() - db_start:.2f}s",
        )

        logger.info("Initializing Redis connection...")
        redis_start = time.time()
        redis_resource = _app.container.infrastructure.redis_db()
        await redis_resource.init()
        await redis_resource.connect()
        logger.info(
            "Redis connection established",
            elapsed=f"{time.time() - redis_start:.2f}s",
        )

        logger.info(
            "Application startup completed",
            elapsed=f"{time.time() - start_time:.2f}s",
        )
    except Exception as e:
        logger.exception("Failed to initialize application", error=str(e))
        raise

    yield

    try:
        # Cleanup connections
        redis_resource = _app.container.infrastructure.redis_db()
        if redis_resource:
            await redis_resource.disconnect()
        db_resource = _app.container.infrastructure.database()
        if db_resource:
            await db_resource.shutdown()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.exception("Error during shutdown", error=str(e))


def register_exception_handlers(_app: FastAPI) -> None:
    @_app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if isinstance(exc, ValidationError):
            logger.debug("Validation failed", errors=exc.details, path=request.url.path)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "status": "error",
                    "error_code": exc.error_code,
                    "message": exc.message,
                    **exc.details,
                },
            )

        if isinstance(exc, InternalError):
            logger.error(
                "Internal failure",
                error=exc.message,
                details=exc.details,
                ip=_client_ip(request),
            )
            content = {
                "status": "error",
                "error_code": exc.error_code,
                "message": exc.message if SETTINGS.APP.DEBUG else "Internal server error",
            }
            if SETTINGS.APP.DEBUG:
                content["detail"] = exc.details.get("error")
            return JSONResponse(status_code=exc.status_code, content=content)

        logger.warning(
            "Request failed",
            error_code=exc.error_code,
            status=exc.status_code,
            error=exc.message,
            path=request.url.path,
            ip=_client_ip(request),
        )
        content = {
            "status": "error",
            "error_code": exc.error_code,
            "message": exc.message,
        }
        if exc.details:
            content["detail"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    @_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            errors.setdefault(".".join(loc) or "body", []).append(error.get("msg", ""))
        logger.debug("Validation failed", errors=errors, path=request.url.path)
        return JSONResponse(
            status_code=422,
            content={
                "status": "error",
                "error_code": "VALIDATION_ERROR",
                "message": "Validation failed",
                "errors": errors,
            },
        )

    @_app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception", error=str(exc), ip=_client_ip(request))
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error_code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            },
        )


def create_fastapi_app() -> CustomFastAPI:
    origins = {
        "*",
        "http://localhost",
        "http://localhost:*",
        "http://localhost:3000",
        "http://localhost:8000",
    }

    _app = CustomFastAPI(
        title="Content Generation API",
        description="Conversational front-end to an external content generation webhook",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    logging.getLogger("uvicorn.error").disabled = False
    logging.getLogger("uvicorn.access").disabled = False

    # Add CORS middleware
    _app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining"],
    )

    # Rate limit headers go on every response of a counted request, errors included
    @_app.middleware("http")
    async def rate_limit_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        headers = getattr(request.state, "rate_limit_headers", None)
        if headers:
            response.headers.update(headers)
        return response

    register_exception_handlers(_app)

    # Include feature routers
    from api.features.auth.router import router as auth_router
    from api.features.content.router import router as content_router
    from api.features.conversation.router import router as conversation_router

    prefix = SETTINGS.APP.API_PREFIX
    _app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["Auth"])
    _app.include_router(content_router, prefix=f"{prefix}/content", tags=["Content"])
    _app.include_router(
        conversation_router, prefix=f"{prefix}/conversations", tags=["Conversations"]
    )

    # Health check endpoints
    @_app.get(f"{prefix}/health", response_model=HealthCheckResponse)
    async def health():
        return HealthCheckResponse(status="ok")

    @_app.get(f"{prefix}/ready", response_model=HealthCheckResponse)
    async def ready():
        dependencies = {}
        try:
            db_resource = _app.container.infrastructure.database()
            session = db_resource.get_session()
            try:
                await session.execute(text("SELECT 1"))
            finally:
                await session.close()
            dependencies["database"] = "ok"
        except Exception as e:
            logger.warning("Database readiness check failed", error=str(e))
            dependencies["database"] = "unavailable"

        try:
            redis_resource = _app.container.infrastructure.redis_db()
            await redis_resource.connect()
            dependencies["redis"] = "ok"
        except Exception as e:
            logger.warning("Redis readiness check failed", error=str(e))
            dependencies["redis"] = "unavailable"

        overall = "ok" if all(v == "ok" for v in dependencies.values()) else "degraded"
        content = HealthCheckResponse(status=overall, dependencies=dependencies)
        return JSONResponse(
            status_code=200 if overall == "ok" else 503,
            content=content.model_dump(mode="json"),
        )

    return _app


app = create_fastapi_app()
