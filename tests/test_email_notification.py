"""
Tests for autoquiz/integrations/email_notification.py - the admin inbox sink.
"""
from unittest.mock import AsyncMock

from autoquiz.integrations.email_notification import EmailNotificationSink
from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.services.transactional_email import EmailTransport


def _transport(status: str = "sent", error: str | None = None) -> AsyncMock:
    transport = AsyncMock(spec=EmailTransport)
    transport.name = "smtp"
    transport.send = AsyncMock(return_value={
        "message_id": "<id@example.com>" if status == "sent" else None,
        "status": status,
        "error": error,
    })
    return transport


class TestEmailNotificationSink:
    def test_configured(self):
        assert EmailNotificationSink(_transport(), "admin@example.com").configured
        assert not EmailNotificationSink(None, "admin@example.com").configured
        assert not EmailNotificationSink(_transport(), "").configured

    async def test_not_configured_outcome(self, complete_record):
        outcome = await EmailNotificationSink(None, "").send(complete_record)
        assert not outcome.ok
        assert outcome.error == "Email not configured"

    async def test_sends_admin_notification(self, complete_record):
        transport = _transport()
        sink = EmailNotificationSink(transport, "admin@example.com")
        outcome = await sink.send(complete_record, prior={"gohighlevel": False, "google_sheets": True})

        assert outcome.ok
        assert outcome.attempts == ["smtp"]
        message = transport.send.call_args.args[0]
        assert message.to_email == "admin@example.com"
        assert message.subject == "New Auto Quiz Lead: Jane Doe - SUV"
        assert "GoHighLevel Survey: Failed" in message.text_content
        assert "Google Sheets: Success" in message.text_content
        assert message.attachments == []

    async def test_pay_stub_attached(self, record_with_pay_stub, pay_stub_bytes):
        transport = _transport()
        await EmailNotificationSink(transport, "admin@example.com").send(record_with_pay_stub)

        attachment = transport.send.call_args.args[0].attachments[0]
        assert attachment.filename == "march-stub.jpg"
        assert attachment.content == pay_stub_bytes
        assert attachment.mime_type == "image/jpeg"

    async def test_unreadable_pay_stub_still_sends(self, complete_record):
        record = LeadRecord.model_validate(
            {**complete_record.to_payload(), "documents": {"payStub": {"original": "garbage"}}}
        )
        transport = _transport()
        outcome = await EmailNotificationSink(transport, "admin@example.com").send(record)

        assert outcome.ok
        assert transport.send.call_args.args[0].attachments == []

    async def test_transport_failure(self, complete_record):
        transport = _transport(status="error", error="auth failed")
        outcome = await EmailNotificationSink(transport, "admin@example.com").send(complete_record)

        assert not outcome.ok
        assert outcome.error == "auth failed"

    async def test_applicant_confirmation_when_enabled(self, complete_record):
        transport = _transport()
        sink = EmailNotificationSink(transport, "admin@example.com", send_applicant_confirmation=True)
        await sink.send(complete_record)

        assert transport.send.call_count == 2
        confirmation = transport.send.call_args_list[1].args[0]
        assert confirmation.to_email == "jane.doe@example.com"
        assert "Thank you" in confirmation.subject

    async def test_confirmation_failure_keeps_outcome_ok(self, complete_record):
        transport = _transport()
        transport.send.side_effect = [
            {"message_id": "<a@b>", "status": "sent", "error": None},
            {"message_id": None, "status": "error", "error": "bounced"},
        ]
        sink = EmailNotificationSink(transport, "admin@example.com", send_applicant_confirmation=True)
        outcome = await sink.send(complete_record)
        assert outcome.ok

    async def test_no_confirmation_by_default(self, complete_record):
        transport = _transport()
        await EmailNotificationSink(transport, "admin@example.com").send(complete_record)
        assert transport.send.call_count == 1
