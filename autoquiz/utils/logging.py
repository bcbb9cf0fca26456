"""
Structured JSON logging with correlation IDs and PII redaction.

One JSON object per line: timestamp, level, correlation_id, module, message,
plus any of EXTRA_FIELDS passed via `extra=`. The correlation ID is set per
request by CorrelationIdMiddleware, so every sink attempt made for one
submission shares it.

Applicant emails and phone numbers are redacted from the rendered message
before it is written, whatever the call site passed in.
"""
import json
import logging
import re
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from autoquiz.utils.masking import mask_email, mask_phone

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes copied into the JSON line when passed via `extra=`
EXTRA_FIELDS = ("sink", "attempt", "step", "status_code", "error_code", "duration_ms")

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
# 10+ digit runs, allowing the usual separators: 416-555-0123, (416) 555 0123, +14165550123
_PHONE_RE = re.compile(r"\+?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b")


def get_correlation_id() -> Optional[str]:
    return correlation_id_ctx.get()


def set_correlation_id(cid: str) -> None:
    correlation_id_ctx.set(cid)


def generate_correlation_id() -> str:
    """UUID4 hex, 32 chars."""
    return uuid.uuid4().hex


def redact_pii(text: str) -> str:
    """Mask email addresses and phone numbers found anywhere in *text*."""
    text = _EMAIL_RE.sub(lambda m: mask_email(m.group(0)), text)
    return _PHONE_RE.sub(lambda m: mask_phone(re.sub(r"\D", "", m.group(0))), text)


class PiiRedactingFilter(logging.Filter):
    """
    Renders the message once and replaces it with its redacted form.
    Tracebacks are formatted here too and cached on exc_text, which
    formatters print instead of re-formatting exc_info.
    """

    _traceback_formatter = logging.Formatter()

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_pii(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        if record.exc_info and record.exc_info[0] is not None:
            traceback_text = record.exc_text or self._traceback_formatter.formatException(record.exc_info)
            record.exc_text = redact_pii(traceback_text)
        return True


class StructuredJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "correlation_id": get_correlation_id(),
            "module": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = record.exc_text or self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry, default=str)


def configure_structured_logging(log_level: str = "INFO", redact: bool = True) -> None:
    """
    Route all logging through a single JSON handler on the root logger.
    Safe to call more than once; earlier handlers are replaced.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(StructuredJsonFormatter())
    if redact:
        stream_handler.addFilter(PiiRedactingFilter())
    root_logger.addHandler(stream_handler)

    for noisy in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
