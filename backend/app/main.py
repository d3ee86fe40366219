"""FastAPI application factory."""

import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError
from pydantic_settings import SettingsError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.router import api_router
from app.config import Settings, get_settings
from app.core.errors import RelayError
from app.core.logging import LoggingMiddleware, get_logger, setup_logging
from app.core.rate_limit import RateLimitMiddleware
from app.core.store.supabase import SupabaseTranscriptionStore
from app.core.transcription.assemblyai import AssemblyAIClient
from app.core.transcription.polling import PollingCoordinator
from app.core.transcription.service import TranscriptionService

VERSION = "0.1.0"

WELCOME_HTML = "<h1>Speech-to-Text API</h1><p>Welcome to the Transcription Backend.</p>"


def _configure_logging(settings: Settings) -> None:
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        is_development=settings.is_development,
        logs_dir=settings.logs_dir,
        log_to_file=settings.log_to_file,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifecycle management."""
    settings: Settings = app.state.settings

    # === STARTUP ===
    _configure_logging(settings)

    logger = get_logger(__name__)
    logger.info("application_starting", app_name=settings.app_name, environment=settings.app_env)

    provider = AssemblyAIClient(
        api_key=settings.assemblyai_api_key,
        base_url=settings.assemblyai_base_url,
        timeout=settings.http_timeout_seconds,
    )
    store = SupabaseTranscriptionStore(
        url=settings.supabase_url,
        key=settings.supabase_anon_key,
        table=settings.supabase_table,
        timeout=settings.http_timeout_seconds,
    )
    coordinator = PollingCoordinator(
        provider,
        interval=settings.poll_interval_seconds,
        max_attempts=settings.poll_max_attempts,
    )

    app.state.transcription_store = store
    app.state.transcription_service = TranscriptionService(provider, coordinator, store)

    logger.info(
        "application_started_successfully",
        app_name=settings.app_name,
        provider=provider.name,
        table=settings.supabase_table,
        poll_interval_seconds=settings.poll_interval_seconds,
        poll_max_attempts=settings.poll_max_attempts,
    )

    yield

    # === SHUTDOWN ===
    logger.info("application_shutting_down", app_name=settings.app_name)
    await provider.aclose()
    await store.aclose()
    logger.info("application_shutdown_complete", app_name=settings.app_name)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": message}``."""
    logger = get_logger(__name__)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        logger.error(
            "request_failed",
            error_type=exc.__class__.__name__,
            error=exc.message,
            status_code=exc.status_code,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        message = first.get("msg", "Invalid request")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", error_type=exc.__class__.__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=VERSION,
        description="Speech-to-text relay: upload audio, transcribe, keep the results",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings

    # Rate limiting (innermost of the three)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    # Logging middleware (adds correlation IDs and request context)
    app.add_middleware(LoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/", response_class=HTMLResponse)
    async def root() -> str:
        """Welcome banner."""
        return WELCOME_HTML

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness probe - does not call the provider or the store."""
        return {
            "status": "ok",
            "app_name": settings.app_name,
            "version": VERSION,
            "environment": settings.app_env,
        }

    return app


def run() -> None:
    """Console entry point: load settings, then serve with uvicorn."""
    import uvicorn

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        missing = [".".join(str(p) for p in err["loc"]).upper() for err in e.errors()]
        get_logger(__name__).error("missing_configuration", settings=missing)
        sys.exit(1)
    except SettingsError as e:
        # Raised when an environment value cannot be decoded at all
        setup_logging()
        get_logger(__name__).error("invalid_configuration", error=str(e))
        sys.exit(1)

    _configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
