"""
Transactional email - lead notifications to the admin inbox and the optional
thank-you email to the applicant.

Two transports: SendGrid (when SENDGRID_API_KEY is set) or plain SMTP
(SMTP_HOST/PORT/USER/PASS). Both offload their blocking client to a thread
and report failures in the result dict instead of raising.
"""
import asyncio
import base64
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from html import escape
from typing import Mapping, Optional

from autoquiz.config import Settings
from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.utils.masking import mask_email

logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 10

SINK_LABELS = {
    "gohighlevel": "GoHighLevel Survey",
    "crm_webhook": "CRM Webhook",
    "google_sheets": "Google Sheets",
}


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"


@dataclass
class OutgoingEmail:
    to_email: str
    subject: str
    html_content: str
    text_content: str
    attachments: list[EmailAttachment] = field(default_factory=list)


class EmailTransport(ABC):
    name: str = ""

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> dict:
        """
        Send one email.
        Returns: {"message_id": str|None, "status": "sent"|"error", "error": str|None}
        """
        ...


class SendGridTransport(EmailTransport):
    name = "sendgrid"

    def __init__(self, api_key: str, from_email: str, from_name: str = "AutoQuiz Pro"):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name

    async def send(self, message: OutgoingEmail) -> dict:
        try:
            from sendgrid import SendGridAPIClient
            from sendgrid.helpers.mail import (
                Attachment, Content, Disposition, Email, FileContent, FileName, FileType, Mail, To,
            )

            mail = Mail(
                from_email=Email(self.from_email, self.from_name),
                to_emails=To(message.to_email),
                subject=message.subject,
            )
            mail.content = [
                Content("text/plain", message.text_content),
                Content("text/html", message.html_content),
            ]
            for attachment in message.attachments:
                mail.add_attachment(Attachment(
                    FileContent(base64.b64encode(attachment.content).decode("ascii")),
                    FileName(attachment.filename),
                    FileType(attachment.mime_type),
                    Disposition("attachment"),
                ))

            sg = SendGridAPIClient(api_key=self.api_key)
            # Offload synchronous SendGrid SDK call to thread pool
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, lambda: sg.send(mail))
            message_id = response.headers.get("X-Message-Id", "")

            logger.info("Email sent via SendGrid: to=%s subject=%s", mask_email(message.to_email), message.subject[:40])
            return {"message_id": message_id, "status": "sent", "error": None}

        except Exception as e:
            logger.error("SendGrid email failed: to=%s error=%s", mask_email(message.to_email), str(e))
            return {"message_id": None, "status": "error", "error": str(e)}


class SmtpTransport(EmailTransport):
    name = "smtp"

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        from_name: str = "AutoQuiz Pro",
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.use_tls = use_tls

    def build_message(self, message: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = message.to_email
        msg["Subject"] = message.subject
        msg["Message-ID"] = make_msgid()
        msg.set_content(message.text_content)
        msg.add_alternative(message.html_content, subtype="html")
        for attachment in message.attachments:
            maintype, _, subtype = attachment.mime_type.partition("/")
            msg.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    async def send(self, message: OutgoingEmail) -> dict:
        msg = self.build_message(message)
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP email failed: to=%s error=%s", mask_email(message.to_email), str(e))
            return {"message_id": None, "status": "error", "error": str(e)}

        logger.info("Email sent via SMTP: to=%s subject=%s", mask_email(message.to_email), message.subject[:40])
        return {"message_id": msg["Message-ID"], "status": "sent", "error": None}


def build_email_transport(settings: Settings) -> Optional[EmailTransport]:
    """SendGrid if a key is set, else SMTP if credentials are set, else None."""
    from_email = settings.email_from or settings.smtp_user
    if settings.sendgrid_api_key and from_email:
        return SendGridTransport(settings.sendgrid_api_key, from_email, settings.email_from_name)
    if settings.smtp_user and settings.smtp_pass:
        return SmtpTransport(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_pass,
            from_email=from_email,
            from_name=settings.email_from_name,
            use_tls=settings.smtp_use_tls,
        )
    return None


def _row(label: str, value: str) -> str:
    return (
        f'<tr><td style="padding: 5px; font-weight: bold;">{label}:</td>'
        f'<td style="padding: 5px;">{escape(value or "")}</td></tr>'
    )


def render_admin_notification(
    record: LeadRecord,
    prior: Optional[Mapping[str, bool]] = None,
    submitted_at: Optional[datetime] = None,
) -> tuple[str, str, str]:
    """
    Build the new-lead email for the admin inbox.
    Returns: (subject, html, text)
    """
    info = record.personal_info
    vehicle = record.vehicle_info
    prior = prior or {}
    submitted = (submitted_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    address = f"{info.street_address}, {info.city}, {info.province} {info.postal_code}"
    pay_stub = record.documents.pay_stub

    subject = f"New Auto Quiz Lead: {info.full_name} - {vehicle.vehicle_type}"

    personal = [
        ("Name", info.full_name), ("Email", info.email), ("Phone", info.phone),
        ("Address", address), ("DOB", info.date_of_birth),
        ("Company", info.company_name), ("Job Title", info.job_title),
    ]
    financial = [
        ("Vehicle Type", vehicle.vehicle_type), ("Desired Vehicle", vehicle.desired_vehicle or "-"),
        ("Budget", vehicle.budget), ("Trade In", vehicle.trade_in),
        ("Credit Score", vehicle.credit_score), ("Employment", vehicle.employment),
        ("Employment Length", vehicle.employment_length), ("Monthly Income", vehicle.income),
        ("Pay Stub", f"{pay_stub.filename} (attached)" if pay_stub else "Not provided"),
    ]
    statuses = [
        (SINK_LABELS.get(sink, sink), "Success" if ok else "Failed") for sink, ok in prior.items()
    ]

    status_html = "".join(
        f"<p><strong>{escape(label)}:</strong> {status}</p>" for label, status in statuses
    ) or "<p>No other integrations ran.</p>"

    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px;">New Auto Quiz Submission</h2>
      <div style="background: #f8f9fa; padding: 15px; border-radius: 5px; margin: 20px 0;">
        <h3 style="margin-top: 0; color: #495057;">Integration Status</h3>
        {status_html}
      </div>
      <div style="background: white; padding: 20px; border: 1px solid #dee2e6; border-radius: 5px;">
        <h3 style="color: #007bff; margin-top: 0;">Personal Information</h3>
        <table style="width: 100%; border-collapse: collapse;">{"".join(_row(k, v) for k, v in personal)}</table>
        <h3 style="color: #007bff; margin-top: 30px;">Vehicle &amp; Financial Information</h3>
        <table style="width: 100%; border-collapse: collapse;">{"".join(_row(k, v) for k, v in financial)}</table>
      </div>
      <div style="margin-top: 20px; padding: 15px; background: #e9ecef; border-radius: 5px;">
        <p style="margin: 0;"><strong>Submission Time:</strong> {submitted}</p>
        <p style="margin: 5px 0 0 0;"><strong>Source:</strong> Auto Quiz Website</p>
      </div>
    </div>
    """

    lines = ["New Auto Quiz Submission", ""]
    if statuses:
        lines += ["Integration Status"] + [f"  {label}: {status}" for label, status in statuses] + [""]
    lines += ["Personal Information"] + [f"  {k}: {v}" for k, v in personal] + [""]
    lines += ["Vehicle & Financial Information"] + [f"  {k}: {v}" for k, v in financial] + [""]
    lines += [f"Submission Time: {submitted}", "Source: Auto Quiz Website"]

    return subject, html, "\n".join(lines)


def render_applicant_confirmation(record: LeadRecord) -> tuple[str, str, str]:
    """
    Build the thank-you email sent to the applicant.
    Returns: (subject, html, text)
    """
    info = record.personal_info
    vehicle = record.vehicle_info
    first_name = info.first_name or "there"
    location = f"{info.city}, {info.province}"

    subject = "Thank you for completing your AutoQuiz Pro assessment!"

    html = f"""
    <div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: 0 auto; color: #333;">
      <div style="background: #003366; color: white; padding: 30px; text-align: center;">
        <h1 style="margin: 0;">AutoQuiz Pro</h1>
        <p>Thank you for completing your automotive assessment!</p>
      </div>
      <div style="padding: 30px;">
        <h2 style="color: #003366;">Hello {escape(first_name)}!</h2>
        <p>We've received your information and our financing experts are already reviewing your responses.</p>
        <h2 style="color: #003366;">Your Assessment Summary</h2>
        <p><strong>Vehicle Interest:</strong> {escape(vehicle.vehicle_type)}</p>
        <p><strong>Budget Range:</strong> {escape(vehicle.budget)}</p>
        <p><strong>Location:</strong> {escape(location)}</p>
        <h2 style="color: #003366;">What Happens Next?</h2>
        <ol>
          <li>Our automotive financing experts review your assessment</li>
          <li>You'll receive personalized financing options within 24 hours</li>
          <li>Schedule a consultation to discuss your best options</li>
        </ol>
      </div>
    </div>
    """

    text = (
        f"Hello {first_name}!\n\n"
        "Thank you for completing your AutoQuiz Pro assessment. Our financing experts "
        "are already reviewing your responses.\n\n"
        "Your Assessment Summary\n"
        f"  Vehicle Interest: {vehicle.vehicle_type}\n"
        f"  Budget Range: {vehicle.budget}\n"
        f"  Location: {location}\n\n"
        "What Happens Next?\n"
        "1. Our automotive financing experts review your assessment\n"
        "2. You'll receive personalized financing options within 24 hours\n"
        "3. Schedule a consultation to discuss your best options\n\n"
        "-- AutoQuiz Pro"
    )

    return subject, html, text
