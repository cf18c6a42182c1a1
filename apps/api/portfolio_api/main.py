from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_api.core.config import settings
from portfolio_api.core.logging_setup import configure_logging
from portfolio_api.core.middleware import RequestIDMiddleware
from portfolio_api.core.openai_client import close_openai_client

configure_logging(settings.LOG_LEVEL)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("app.startup", environment=settings.ENVIRONMENT)

    if not settings.OPENAI_API_KEY:
        logger.warning(
            "app.startup.openai_key_missing",
            hint="Set OPENAI_API_KEY; fit assessments will fail without it",
        )
    if not settings.API_KEY:
        logger.warning(
            "app.startup.api_key_missing",
            hint="Set API_KEY; /api/v1 endpoints are unauthenticated without it",
        )

    yield

    logger.info("app.shutdown")
    await close_openai_client()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Portfolio API",
        description="Portfolio site backend - job fit assessment",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "X-API-Key",
            "X-Request-ID",
        ],
        max_age=3600,
    )

    app.add_middleware(RequestIDMiddleware)

    from portfolio_api.api.v1 import fit_assessment

    app.include_router(
        fit_assessment.router,
        prefix="/api/v1/fit-assessment",
        tags=["fit-assessment"],
    )

    @app.get("/health")
    async def health_check():
        """Liveness check. The resolver has no backing services to probe."""
        return {"status": "ok"}

    return app


app = create_app()
