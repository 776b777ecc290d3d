"""Main FastAPI application."""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.devices import router as devices_router
from app.api.notify import router as notify_router
from app.domain.common.errors import DomainError
from app.domain.common.types import Clock, SystemClock
from app.infra.db.base import Base, build_engine, build_sessionmaker
from app.infra.db import models  # noqa: F401  (registers tables on Base.metadata)
from app.infra.jobs.tasks import nonce_pruner_loop
from app.readiness import is_ready, run_all_checks_async
from app.settings import Settings, load_settings

logger = logging.getLogger(__name__)

# Header values that must never reach the logs.
_REDACTED_HEADERS = {"authorization", "x-device-token", "x-signature", "x-secret-key"}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings

    # Startup
    if settings.create_tables_on_startup:
        try:
            async with app.state.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            # Database might not be ready yet; requests will surface storage errors
            logger.warning(f"Could not create tables during startup: {e}")

    pruner_task = None
    if settings.nonce_prune_interval_seconds > 0:
        pruner_task = asyncio.create_task(
            nonce_pruner_loop(
                app.state.session_factory,
                app.state.clock,
                settings.nonce_retention_seconds,
                settings.nonce_prune_interval_seconds,
            )
        )

    yield

    # Shutdown
    if pruner_task is not None:
        pruner_task.cancel()
        try:
            await pruner_task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Nonce pruner ended with an error")
    await app.state.engine.dispose()


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info(f"📥 [SERVER REQUEST] {request.method} {request.url.path}")
        if request.headers:
            headers = {
                k: ("***" if k.lower() in _REDACTED_HEADERS else v)
                for k, v in request.headers.items()
            }
            logger.debug(f"   Headers: {headers}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"📤 [SERVER RESPONSE] {request.method} {request.url.path} - "
            f"{response.status_code} ({process_time:.3f}s)"
        )
        return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are InvalidInput (400)."""
        errors = exc.errors()
        logger.warning(f"❌ [VALIDATION ERROR] {request.method} {request.url.path}: {len(errors)} error(s)")
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_input",
                "detail": jsonable_encoder(
                    [{"loc": e.get("loc"), "msg": e.get("msg")} for e in errors]
                ),
            },
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        """Map domain errors to their status code and stable error code."""
        if exc.status_code >= 500:
            logger.error(f"❌ [{exc.code.upper()}] {request.method} {request.url.path}: {exc.message}")
        else:
            logger.info(f"⚠️ [{exc.code.upper()}] {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.message},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Never leak stack traces to the caller."""
        logger.exception(f"❌ [INTERNAL ERROR] {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "detail": "Internal server error"},
        )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Build the application around one Settings value."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine or build_engine(
        settings.database_url,
        echo=settings.database_echo,
        ssl_verify=settings.database_ssl_verify,
    )
    app.state.session_factory = build_sessionmaker(app.state.engine)
    app.state.clock = clock or SystemClock()

    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return f"{settings.app_name} is running"

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "time": app.state.clock.utcnow().isoformat() + "Z",
            "version": settings.app_version,
        }

    @app.get("/ready")
    async def readiness():
        """Readiness endpoint: run all checks and return 200 if ready, 503 otherwise."""
        checks = await run_all_checks_async(settings, app.state.engine)
        ready, summary = is_ready(checks)
        if ready:
            return {"ready": True, "checks": summary}
        return JSONResponse(
            status_code=503,
            content={"ready": False, "checks": summary},
        )

    app.include_router(devices_router)
    app.include_router(notify_router)
    return app


app = create_app()
