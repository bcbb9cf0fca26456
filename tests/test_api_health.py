"""
Tests for autoquiz/api/health.py - liveness and readiness.
"""
from datetime import datetime

from autoquiz import __version__
from autoquiz.api.health import health_check, readiness_check
from autoquiz.services.submission import SubmissionOrchestrator


# ---------------------------------------------------------------------------
# GET /health - basic liveness
# ---------------------------------------------------------------------------


class TestHealthCheck:
    async def test_returns_healthy(self):
        """Liveness check always returns healthy with timestamp and version."""
        result = await health_check()
        assert result["status"] == "healthy"
        assert result["version"] == __version__

    async def test_timestamp_is_utc_iso(self):
        result = await health_check()
        parsed = datetime.fromisoformat(result["timestamp"])
        assert parsed.tzinfo is not None


# ---------------------------------------------------------------------------
# GET /health/ready - can a lead be delivered?
# ---------------------------------------------------------------------------


class TestReadinessCheck:
    async def test_ready_with_configured_sink(self, fake_sink):
        orchestrator = SubmissionOrchestrator([fake_sink("gohighlevel"), fake_sink("email")])
        result = await readiness_check(orchestrator=orchestrator)
        assert result["status"] == "ready"
        assert result["sinks"] == {"gohighlevel": True, "email": True}

    async def test_degraded_without_sinks(self):
        result = await readiness_check(orchestrator=SubmissionOrchestrator([]))
        assert result["status"] == "degraded"
        assert result["sinks"] == {}

    async def test_degraded_when_only_non_critical_sinks(self, fake_sink):
        orchestrator = SubmissionOrchestrator([fake_sink("email")], critical=["gohighlevel"])
        result = await readiness_check(orchestrator=orchestrator)
        assert result["status"] == "degraded"
        assert result["sinks"] == {"email": False}
