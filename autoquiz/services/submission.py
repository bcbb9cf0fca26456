"""
Submission orchestrator - fans a completed lead out to the configured sinks.

Sinks run one after another in configured order. A failing sink never stops
the next one; the submission succeeds if at least one critical sink took the
lead. On total failure the caller still holds the untouched record, so the
applicant can retry without re-entering anything.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from autoquiz.config import Settings
from autoquiz.integrations.crm_webhook import CrmWebhookSink
from autoquiz.integrations.email_notification import EmailNotificationSink
from autoquiz.integrations.gohighlevel import GoHighLevelSurveySink
from autoquiz.integrations.google_sheets import GoogleSheetsSink
from autoquiz.integrations.sink_base import LeadSink, SinkOutcome
from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.services.transactional_email import build_email_transport

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Survey submission processed successfully"
BACKUP_MESSAGE = "Survey submission received (backup method used)"
FAILURE_MESSAGE = "All submission methods failed"


@dataclass
class SubmissionResult:
    success: bool
    message: str
    outcomes: list[SinkOutcome] = field(default_factory=list)

    @property
    def integrations(self) -> dict[str, bool]:
        return {outcome.sink: outcome.ok for outcome in self.outcomes}

    @property
    def errors(self) -> list[str]:
        return [f"{o.sink}: {o.error or 'failed'}" for o in self.outcomes if not o.ok]


class SubmissionOrchestrator:
    def __init__(self, sinks: Sequence[LeadSink], critical: Optional[Iterable[str]] = None):
        self.sinks = list(sinks)
        # None means every sink is critical
        self.critical = set(critical) if critical else None

    @property
    def sink_names(self) -> list[str]:
        return [sink.name for sink in self.sinks]

    def is_critical(self, sink_name: str) -> bool:
        return self.critical is None or sink_name in self.critical

    async def _run_sink(self, sink: LeadSink, record: LeadRecord, prior: dict[str, bool]) -> SinkOutcome:
        started = time.monotonic()
        try:
            outcome = await sink.send(record, prior=dict(prior))
        except Exception as e:
            logger.error(
                "Sink %s raised: %s", sink.name, str(e),
                exc_info=True, extra={"sink": sink.name},
            )
            outcome = SinkOutcome(sink=sink.name, ok=False, error=str(e))

        logger.info(
            "Sink %s %s", sink.name, "succeeded" if outcome.ok else "failed",
            extra={"sink": sink.name, "duration_ms": int((time.monotonic() - started) * 1000)},
        )
        return outcome

    async def submit(self, record: LeadRecord) -> SubmissionResult:
        """Deliver one lead to every sink. Never raises for a sink failure."""
        outcomes: list[SinkOutcome] = []
        prior: dict[str, bool] = {}

        for sink in self.sinks:
            outcome = await self._run_sink(sink, record, prior)
            outcomes.append(outcome)
            prior[sink.name] = outcome.ok

        if not any(o.ok and self.is_critical(o.sink) for o in outcomes):
            logger.error(
                "Lead delivery failed on every critical sink (%s)",
                ", ".join(self.sink_names) or "none configured",
            )
            return SubmissionResult(success=False, message=FAILURE_MESSAGE, outcomes=outcomes)

        message = SUCCESS_MESSAGE if outcomes[0].ok else BACKUP_MESSAGE
        return SubmissionResult(success=True, message=message, outcomes=outcomes)


def _sink_factories(settings: Settings) -> dict[str, Callable[[], LeadSink]]:
    timeout = settings.sink_timeout_seconds
    return {
        "gohighlevel": lambda: GoHighLevelSurveySink(
            survey_id=settings.ghl_survey_id,
            survey_url=settings.ghl_survey_url,
            site_url=settings.app_base_url,
            timeout=timeout,
        ),
        "crm_webhook": lambda: CrmWebhookSink(
            url=settings.crm_webhook_url,
            api_key=settings.crm_webhook_key,
            timeout=timeout,
        ),
        "google_sheets": lambda: GoogleSheetsSink(
            spreadsheet_id=settings.google_sheets_spreadsheet_id,
            credentials_json=settings.google_sheets_credentials_json,
            sheet_range=settings.google_sheets_range,
            timeout=timeout,
        ),
        "email": lambda: EmailNotificationSink(
            transport=build_email_transport(settings),
            admin_email=settings.admin_email,
            send_applicant_confirmation=settings.send_applicant_confirmation,
        ),
    }


def describe_sinks(settings: Settings) -> dict[str, bool]:
    """{sink_name: configured} for every known sink, for health checks."""
    return {name: factory().configured for name, factory in _sink_factories(settings).items()}


def build_orchestrator(settings: Settings) -> SubmissionOrchestrator:
    """Construct the configured sinks in SUBMISSION_SINK_ORDER. Called once at startup."""
    factories = _sink_factories(settings)
    sinks: list[LeadSink] = []

    for name in settings.sink_order:
        factory = factories.get(name)
        if factory is None:
            logger.warning("Unknown sink %r in SUBMISSION_SINK_ORDER - ignored", name)
            continue
        sink = factory()
        if not sink.configured:
            logger.info("Sink %s not configured - skipped", name)
            continue
        sinks.append(sink)

    critical = settings.critical_sinks or None
    if critical and not set(critical) & {sink.name for sink in sinks}:
        logger.warning(
            "None of the critical sinks (%s) is configured - every submission will fail",
            ", ".join(critical),
        )
    if not sinks:
        logger.warning("No submission sinks configured - every submission will fail")

    logger.info("Submission sinks: %s", ", ".join(sink.name for sink in sinks) or "none")
    return SubmissionOrchestrator(sinks, critical=critical)
