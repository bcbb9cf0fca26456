"""
GoHighLevel survey integration - pushes a completed quiz into a GHL survey.

The widget endpoints are public and their accepted format has shifted over
time, so delivery tries three shapes in order:
  1. JSON to the survey submit endpoint (responses + contact block)
  2. form-encoded responses to the generic form widget endpoint
  3. form-encoded responses to the configured survey URL (GHL_SURVEY_URL)
"""
import logging
from datetime import datetime, timezone

from autoquiz.integrations.sink_base import DEFAULT_TIMEOUT, DeliveryAttempt, HttpFallbackSink
from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.survey.steps import LeadField

logger = logging.getLogger(__name__)

WIDGET_BASE_URL = "https://api.leadconnectorhq.com/widget"
CONTACT_COUNTRY = "CA"

# Field names as they appear in the survey's HTML
SURVEY_FIELD_NAMES: dict[LeadField, str] = {
    LeadField.VEHICLE_TYPE: "what_type_of_vehicle_are_you_looking_for",
    LeadField.BUDGET: "what_is_you_budget",
    LeadField.TRADE_IN: "radio_3dxv",
    LeadField.CREDIT_SCORE: "what_is_your_estimated_credit_rating",
    LeadField.EMPLOYMENT: "what_is_your_employment_status",
    LeadField.INCOME: "what_is_your_monthly_income",
    LeadField.EMPLOYMENT_LENGTH: "how_long_have_you_been_employed_at_your_current_job",
    LeadField.COMPANY_NAME: "companys_name",
    LeadField.JOB_TITLE: "job_title",
    LeadField.STREET_ADDRESS: "address",
    LeadField.CITY: "City_country",
    LeadField.PROVINCE: "province",
    LeadField.POSTAL_CODE: "postal_code",
    LeadField.DATE_OF_BIRTH: "date_of_birth",
    LeadField.FULL_NAME: "full_name",
    LeadField.PHONE: "phone",
    LeadField.EMAIL: "email_0",
}


class GoHighLevelSurveySink(HttpFallbackSink):
    """GoHighLevel survey submission with JSON -> form -> direct URL fallback."""

    name = "gohighlevel"

    def __init__(
        self,
        survey_id: str = "",
        survey_url: str = "",
        site_url: str = "",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(timeout=timeout)
        self.survey_id = survey_id
        self.survey_url = survey_url
        self.site_url = site_url

    @property
    def configured(self) -> bool:
        return bool(self.survey_id or self.survey_url)

    def _headers(self, accept: str) -> dict:
        headers = {"Accept": accept}
        if self.site_url:
            headers["Origin"] = self.site_url
            headers["Referer"] = self.site_url
        return headers

    @staticmethod
    def survey_responses(record: LeadRecord) -> dict[str, str]:
        """Map the record onto the survey's field names."""
        responses = {name: field.get(record) for field, name in SURVEY_FIELD_NAMES.items()}
        if record.vehicle_info.desired_vehicle.strip():
            responses["desired_vehicle"] = record.vehicle_info.desired_vehicle
        return responses

    @staticmethod
    def contact_block(record: LeadRecord) -> dict[str, str]:
        info = record.personal_info
        return {
            "firstName": info.first_name,
            "lastName": info.last_name,
            "email": info.email,
            "phone": info.phone,
            "address1": info.street_address,
            "city": info.city,
            "state": info.province,
            "postalCode": info.postal_code,
            "country": CONTACT_COUNTRY,
        }

    def build_attempts(self, record: LeadRecord) -> list[DeliveryAttempt]:
        responses = self.survey_responses(record)
        submitted_at = datetime.now(timezone.utc).isoformat()
        attempts: list[DeliveryAttempt] = []

        if self.survey_id:
            attempts.append(DeliveryAttempt(
                name="survey_json",
                url=f"{WIDGET_BASE_URL}/survey/{self.survey_id}/submit",
                body={
                    "surveyId": self.survey_id,
                    "source": "website",
                    "submittedAt": submitted_at,
                    "responses": responses,
                    "contact": self.contact_block(record),
                },
                encoding="json",
                headers=self._headers("application/json"),
            ))
            attempts.append(DeliveryAttempt(
                name="form_widget",
                url=f"{WIDGET_BASE_URL}/form/submit",
                body={**responses, "surveyId": self.survey_id, "source": "website"},
                encoding="form",
                headers=self._headers("*/*"),
            ))

        if self.survey_url:
            attempts.append(DeliveryAttempt(
                name="survey_url",
                url=self.survey_url,
                body={
                    **responses,
                    "source": "Auto Quiz Website",
                    "lead_type": "Auto Financing Survey",
                    "submission_time": submitted_at,
                },
                encoding="form",
                headers=self._headers("*/*"),
            ))

        return attempts
