"""
Abstract lead sink interface - every delivery destination implements this.

A sink owns its own request shaping; the orchestrator only sees
send(record) -> SinkOutcome. Sinks report failures, they never raise them.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping, Optional

import httpx

from autoquiz.schemas.lead_record import LeadRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


@dataclass
class SinkOutcome:
    sink: str
    ok: bool
    error: Optional[str] = None
    attempts: list[str] = field(default_factory=list)


class LeadSink(ABC):
    """Abstract base class for lead delivery destinations."""

    name: str = ""

    @property
    def configured(self) -> bool:
        return True

    @abstractmethod
    async def send(
        self,
        record: LeadRecord,
        prior: Optional[Mapping[str, bool]] = None,
    ) -> SinkOutcome:
        """
        Deliver one lead.
        prior: outcomes of the sinks that ran before this one, {sink_name: ok}.
        """
        ...


@dataclass(frozen=True)
class DeliveryAttempt:
    """One way of delivering a lead: an endpoint plus a body encoding."""
    name: str
    url: str
    body: dict
    encoding: str = "json"  # json | form
    headers: dict = field(default_factory=dict)


class HttpFallbackSink(LeadSink):
    """
    A sink whose target accepts more than one request shape.
    Attempts run in order with a short timeout; the first 2xx wins.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    @abstractmethod
    def build_attempts(self, record: LeadRecord) -> list[DeliveryAttempt]:
        ...

    async def _post(self, attempt: DeliveryAttempt) -> httpx.Response:
        if attempt.encoding == "form":
            payload = {"data": {k: "" if v is None else str(v) for k, v in attempt.body.items()}}
        else:
            payload = {"json": attempt.body}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(attempt.url, headers=attempt.headers, **payload)

    async def send(
        self,
        record: LeadRecord,
        prior: Optional[Mapping[str, bool]] = None,
    ) -> SinkOutcome:
        attempts = self.build_attempts(record)
        tried: list[str] = []
        last_error = "No delivery endpoints configured"

        for attempt in attempts:
            tried.append(attempt.name)
            try:
                response = await self._post(attempt)
            except httpx.HTTPError as e:
                last_error = f"{attempt.name}: {type(e).__name__}: {e}"
                logger.warning(
                    "%s attempt %s failed: %s", self.name, attempt.name, str(e),
                    extra={"sink": self.name, "attempt": attempt.name},
                )
                continue

            if response.is_success:
                logger.info(
                    "%s delivery succeeded via %s", self.name, attempt.name,
                    extra={"sink": self.name, "attempt": attempt.name, "status_code": response.status_code},
                )
                return SinkOutcome(sink=self.name, ok=True, attempts=tried)

            last_error = f"{attempt.name}: HTTP {response.status_code}"
            logger.warning(
                "%s attempt %s rejected: HTTP %d %s",
                self.name, attempt.name, response.status_code, response.text[:200],
                extra={"sink": self.name, "attempt": attempt.name, "status_code": response.status_code},
            )

        logger.error(
            "All %s delivery attempts failed (%d tried): %s",
            self.name, len(tried), last_error,
            extra={"sink": self.name},
        )
        return SinkOutcome(sink=self.name, ok=False, error=last_error, attempts=tried)
