"""
AutoQuiz Pro - auto-financing pre-qualification survey backend.
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from autoquiz import __version__
from autoquiz.config import get_settings
from autoquiz.api.router import api_router
from autoquiz.integrations.google_places import GooglePlacesClient
from autoquiz.services.submission import build_orchestrator
from autoquiz.utils.logging import (
    configure_structured_logging,
    generate_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger("autoquiz")

MAX_CORRELATION_ID_LENGTH = 64


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation ID (caller-supplied or fresh) and echoes it back."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("X-Correlation-ID", "")[:MAX_CORRELATION_ID_LENGTH] or generate_correlation_id()
        set_correlation_id(cid)
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    settings = get_settings()
    logger.info("AutoQuiz starting up (env=%s)", settings.app_env)

    if not settings.google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY not set - address autocomplete disabled")

    # Initialize Sentry if configured
    if settings.sentry_dsn:
        try:
            import sentry_sdk
            sentry_sdk.init(
                dsn=settings.sentry_dsn,
                traces_sample_rate=0.1,
                environment=settings.app_env,
            )
            logger.info("Sentry initialized")
        except Exception as e:
            logger.warning("Sentry initialization failed: %s", str(e))

    orchestrator = app.state.orchestrator
    logger.info(
        "Lead sinks ready: %s",
        ", ".join(orchestrator.sink_names) or "none",
    )

    yield

    logger.info("AutoQuiz shutdown complete")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    # Configure structured JSON logging with correlation IDs
    configure_structured_logging(settings.log_level)

    application = FastAPI(
        title="AutoQuiz",
        description="Auto-financing pre-qualification survey and lead delivery",
        version=__version__,
        lifespan=lifespan,
    )

    application.state.orchestrator = build_orchestrator(settings)
    application.state.places_client = GooglePlacesClient(settings.google_places_api_key)

    # CORS - allow the survey front end
    origins = ["http://localhost:3000", settings.app_base_url]
    origins.extend(o for o in settings.cors_origins if o not in origins)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type", "X-Correlation-ID",
            "Accept", "Origin", "X-Requested-With",
        ],
    )

    # Correlation ID middleware (added after CORS so it runs on every request)
    application.add_middleware(CorrelationIdMiddleware)

    application.include_router(api_router)

    return application


app = create_app()
