"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- Storage, slug registry and services (built once at startup)
- API routes and health endpoints
- Middleware (logging, CORS) and rate limiting

Design Decisions:
- create_app() takes optional storage/slugs so tests can inject their own
- Services live on app.state and reach endpoints through Depends()
- Storage created here is closed on shutdown; injected storage is left
  to its owner
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tg_redirect.api import endpoints
from tg_redirect.api.schemas import HealthResponse
from tg_redirect.core.logging_config import configure_logging
from tg_redirect.core.rate_limit import configure_rate_limits, limiter
from tg_redirect.core.setting import Settings, settings as default_settings
from tg_redirect.core.utils import utc_now_iso
from tg_redirect.db.interface import AttributionStorage
from tg_redirect.db.session import create_storage
from tg_redirect.middleware.logging import add_logging_middleware
from tg_redirect.services.code_cache import CodeCache
from tg_redirect.services.code_codec import CodeCodec
from tg_redirect.services.redirect_service import RedirectService
from tg_redirect.services.resolve_service import ResolveService
from tg_redirect.services.slugs import SlugRegistry, find_slugs_config_path
from tg_redirect.services.stats_service import StatsService

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[AttributionStorage] = None,
    slugs: Optional[SlugRegistry] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (environment by default)
        storage: Pre-built storage backend; created from settings when None
        slugs: Pre-built slug registry; loaded from SLUGS_CONFIG_PATH when None
    """
    settings = settings or default_settings
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        settings.validate_for_environment()

        if slugs is not None:
            registry = slugs
        else:
            registry = SlugRegistry.from_file(find_slugs_config_path(settings.SLUGS_CONFIG_PATH))
        owns_storage = storage is None
        backend = storage if storage is not None else await create_storage(settings)
        codec = CodeCodec(settings.CODE_SIGNING_SECRET)

        app.state.settings = settings
        app.state.slugs = registry
        app.state.storage = backend
        app.state.redirect_service = RedirectService(
            backend,
            codec,
            registry,
            ip_hash_salt=settings.IP_HASH_SALT,
        )
        app.state.resolve_service = ResolveService(
            backend,
            codec,
            CodeCache(settings.CODE_CACHE_SIZE, settings.CODE_CACHE_TTL_SECONDS),
            one_time_codes=settings.ONE_TIME_CODES,
        )
        app.state.stats_service = StatsService(backend, registry)
        logger.info(f"Service started: env={settings.ENV_SETTING.value} storage={type(backend).__name__}")

        yield

        logger.info("Shutting down...")
        if owns_storage:
            await backend.close()

    app = FastAPI(
        title="Telegram Redirect & Attribution Service",
        description="Redirects ad clicks to Telegram and hands click attribution to bots via signed codes",
        version=VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    configure_rate_limits(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["Health"])
    async def root():
        return {
            "message": "Telegram Redirect & Attribution Service",
            "version": VERSION,
        }

    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    async def health_check():
        return HealthResponse(
            status="ok",
            timestamp=utc_now_iso(),
            version=VERSION,
            uptime=int(time.monotonic() - started_at),
        )

    @app.get("/ready", tags=["Health"])
    async def readiness_check():
        return {"ready": True}

    @app.get("/live", tags=["Health"])
    async def liveness_check():
        return {"live": True}

    app.include_router(endpoints.router, tags=["Redirect"])

    return app


app = create_app()


def run() -> None:
    """Start the server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "tg_redirect.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        proxy_headers=True,
    )


if __name__ == "__main__":
    run()
