"""
PII masking for log lines. Applicant contact details never hit the logs in full.
"""


def mask_phone(phone: str) -> str:
    """Mask phone number for logging - show first 6 characters only."""
    if phone and len(phone) > 6:
        return phone[:6] + "***"
    return phone or ""


def mask_email(email: str) -> str:
    """Mask email for logging - keep the first character and the domain."""
    if not email or "@" not in email:
        return "***"
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"


def mask_name(full_name: str) -> str:
    """Keep the first name, initial the rest."""
    parts = (full_name or "").split()
    if not parts:
        return ""
    return " ".join([parts[0]] + [p[0] + "." for p in parts[1:]])
