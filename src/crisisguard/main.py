"""
CRISISGUARD FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (startup/shutdown)
- CORS configuration
- Error handling middleware
- Router registration
- Metrics endpoint

Configuration errors (pattern tables, scorer backend, resource file)
are raised during startup so the process fails before serving.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crisisguard import __version__
from crisisguard.api.middleware.error_handler import (
    ErrorHandlerMiddleware,
    register_exception_handlers,
)
from crisisguard.api.v1.router import api_router
from crisisguard.config import Settings, get_settings
from crisisguard.config.logging_config import configure_logging, get_logger
from crisisguard.infrastructure.metrics import metrics_router, update_system_info
from crisisguard.infrastructure.monitoring import init_sentry
from crisisguard.services.orchestration.crisis_analysis_service import CrisisAnalysisService

logger = get_logger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    service: Optional[CrisisAnalysisService] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use (defaults to environment)
        service: Prebuilt analysis service, mainly for tests

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging(settings)
        logger.info("Starting CRISISGUARD application", env=settings.env, version=__version__)

        init_sentry(
            dsn=settings.monitoring.sentry_dsn.get_secret_value(),
            environment=settings.env,
            release=f"crisisguard@{__version__}",
            traces_sample_rate=settings.monitoring.sentry_traces_sample_rate,
        )
        update_system_info(settings.env, __version__)

        analysis_service = service or CrisisAnalysisService.from_settings(settings)
        await analysis_service.statistical.scorer.load()
        app.state.analysis_service = analysis_service
        logger.info("Crisis analysis service initialized")

        try:
            yield
        finally:
            logger.info("Shutting down CRISISGUARD application")
            await analysis_service.close()
            app.state.analysis_service = None
            logger.info("CRISISGUARD application shutdown complete")

    app = FastAPI(
        title="CRISISGUARD API",
        description="Crisis signal detection and escalation",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    register_exception_handlers(app)

    app.include_router(api_router, prefix=f"/api/{settings.api_version}")
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": "CRISISGUARD API",
            "version": __version__,
            "status": "operational",
        }

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "crisisguard.main:create_application",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
