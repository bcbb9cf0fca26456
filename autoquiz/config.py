"""
Application configuration using pydantic-settings.
Every sink is optional - an unconfigured sink is simply skipped at submit time.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_base_url: str = "http://localhost:3000"  # Public site URL, sent as Origin/Referer
    log_level: str = "INFO"
    allowed_origins: str = ""  # Comma-separated extra CORS origins

    # Sentry
    sentry_dsn: str = ""

    # SMTP (used when no SendGrid key is set)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_use_tls: bool = True

    # SendGrid
    sendgrid_api_key: str = ""

    # Notification email
    email_from: str = ""  # Falls back to SMTP_USER
    email_from_name: str = "AutoQuiz Pro"
    admin_email: str = ""
    send_applicant_confirmation: bool = False

    # Google Sheets
    google_sheets_spreadsheet_id: str = ""
    google_sheets_credentials_json: str = ""  # Service account key, raw JSON
    google_sheets_range: str = "Leads!A1"

    # GoHighLevel survey
    ghl_survey_id: str = ""
    ghl_survey_url: str = ""  # Direct form URL, last fallback

    # Generic CRM / marketing automation endpoint
    crm_webhook_url: str = ""
    crm_webhook_key: str = ""

    # Google Places (address autocomplete)
    google_places_api_key: str = ""

    # Submission pipeline
    submission_sink_order: str = "gohighlevel,crm_webhook,google_sheets,email"
    submission_critical_sinks: str = ""  # Empty = every configured sink counts
    sink_timeout_seconds: float = 5.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def sink_order(self) -> list[str]:
        return _split_csv(self.submission_sink_order)

    @property
    def critical_sinks(self) -> list[str]:
        return _split_csv(self.submission_critical_sinks)

    @property
    def cors_origins(self) -> list[str]:
        return _split_csv(self.allowed_origins)


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
