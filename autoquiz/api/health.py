"""
Health check endpoints - used by load balancers and Docker healthcheck.

- GET /health       - basic liveness (always 200 if app running)
- GET /health/ready - readiness: can a submission succeed with the sinks we have?
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from autoquiz import __version__
from autoquiz.api.survey import get_orchestrator
from autoquiz.services.submission import SubmissionOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check - returns 200 if the app is running."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


@router.get("/health/ready")
async def readiness_check(
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
):
    """
    Readiness check - 'ready' when at least one critical sink is configured,
    otherwise 'degraded' (the site works but leads cannot be delivered).
    """
    sinks = {name: orchestrator.is_critical(name) for name in orchestrator.sink_names}
    ready = any(sinks.values())
    if not ready:
        logger.warning("Readiness degraded: no critical submission sink configured")
    return {
        "status": "ready" if ready else "degraded",
        "sinks": sinks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
