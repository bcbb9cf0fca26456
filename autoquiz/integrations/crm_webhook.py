"""
Generic CRM / marketing-automation webhook.

Any intake endpoint that takes a lead over HTTP: the camelCase lead as JSON
first, then the same fields flattened and form-encoded. Pay stub content is
never forwarded, only its filename and size.
"""
from datetime import datetime, timezone

from autoquiz.integrations.sink_base import DEFAULT_TIMEOUT, DeliveryAttempt, HttpFallbackSink
from autoquiz.schemas.lead_record import LeadRecord

LEAD_SOURCE = "Auto Quiz Website"


class CrmWebhookSink(HttpFallbackSink):
    name = "crm_webhook"

    def __init__(self, url: str, api_key: str = "", timeout: float = DEFAULT_TIMEOUT):
        super().__init__(timeout=timeout)
        self.url = url
        self.api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def _headers(self, content_type: str) -> dict:
        headers = {"Accept": "application/json", "Content-Type": content_type}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @staticmethod
    def lead_payload(record: LeadRecord) -> dict:
        payload = record.model_dump(by_alias=True, exclude={"documents"})
        pay_stub = record.documents.pay_stub
        payload["documents"] = {
            "payStub": {"filename": pay_stub.filename, "size": pay_stub.size} if pay_stub else None,
        }
        return payload

    def build_attempts(self, record: LeadRecord) -> list[DeliveryAttempt]:
        if not self.url:
            return []
        submitted_at = datetime.now(timezone.utc).isoformat()
        return [
            DeliveryAttempt(
                name="json",
                url=self.url,
                body={"source": LEAD_SOURCE, "submittedAt": submitted_at, "lead": self.lead_payload(record)},
                encoding="json",
                headers=self._headers("application/json"),
            ),
            DeliveryAttempt(
                name="form",
                url=self.url,
                body={
                    **record.to_flat_fields(include_documents=True),
                    "source": LEAD_SOURCE,
                    "submittedAt": submitted_at,
                },
                encoding="form",
                headers=self._headers("application/x-www-form-urlencoded"),
            ),
        ]
