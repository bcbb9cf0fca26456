"""
Email notification sink - the admin inbox gets every lead, with the status of
the integrations that ran before it and the pay stub attached.
"""
import logging
from typing import Mapping, Optional

from autoquiz.integrations.sink_base import LeadSink, SinkOutcome
from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.services.transactional_email import (
    EmailAttachment,
    EmailTransport,
    OutgoingEmail,
    render_admin_notification,
    render_applicant_confirmation,
)
from autoquiz.utils.masking import mask_email

logger = logging.getLogger(__name__)


class EmailNotificationSink(LeadSink):
    name = "email"

    def __init__(
        self,
        transport: Optional[EmailTransport],
        admin_email: str,
        send_applicant_confirmation: bool = False,
    ):
        self.transport = transport
        self.admin_email = admin_email
        self.send_applicant_confirmation = send_applicant_confirmation

    @property
    def configured(self) -> bool:
        return self.transport is not None and bool(self.admin_email)

    @staticmethod
    def _attachments(record: LeadRecord) -> list[EmailAttachment]:
        pay_stub = record.documents.pay_stub
        if not pay_stub:
            return []
        try:
            content, mime_type = pay_stub.decode()
        except ValueError as e:
            logger.warning("Pay stub not attached, payload unreadable: %s", str(e))
            return []
        return [EmailAttachment(filename=pay_stub.filename, content=content, mime_type=mime_type)]

    async def send(
        self,
        record: LeadRecord,
        prior: Optional[Mapping[str, bool]] = None,
    ) -> SinkOutcome:
        if not self.configured:
            logger.info("Email configuration missing, skipping email notification")
            return SinkOutcome(sink=self.name, ok=False, error="Email not configured")

        subject, html, text = render_admin_notification(record, prior)
        result = await self.transport.send(OutgoingEmail(
            to_email=self.admin_email,
            subject=subject,
            html_content=html,
            text_content=text,
            attachments=self._attachments(record),
        ))
        attempts = [self.transport.name]

        if result.get("status") != "sent":
            return SinkOutcome(sink=self.name, ok=False, error=result.get("error"), attempts=attempts)

        if self.send_applicant_confirmation:
            await self._confirm_applicant(record)

        return SinkOutcome(sink=self.name, ok=True, attempts=attempts)

    async def _confirm_applicant(self, record: LeadRecord) -> None:
        """Best-effort thank-you email; never changes the sink outcome."""
        subject, html, text = render_applicant_confirmation(record)
        result = await self.transport.send(OutgoingEmail(
            to_email=record.personal_info.email,
            subject=subject,
            html_content=html,
            text_content=text,
        ))
        if result.get("status") != "sent":
            logger.warning(
                "Applicant confirmation to %s failed: %s",
                mask_email(record.personal_info.email), result.get("error"),
            )
