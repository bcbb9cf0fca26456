"""
Survey validation.

validate_step() gates the "Next" transition for one step; validate_submission()
is the whole-record check the submission endpoint runs before any sink is called.
Both are pure functions of the record.
"""
import re
from dataclasses import dataclass
from typing import Optional

from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.survey.steps import LeadField, get_step

# local@domain.tld, no whitespace anywhere
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"


@dataclass(frozen=True)
class StepValidation:
    valid: bool
    message: Optional[str] = None


VALID = StepValidation(valid=True)


def is_valid_email_format(email: str) -> bool:
    """Check that an email has the local@domain.tld shape."""
    if not email or len(email) > 254:
        return False
    return bool(EMAIL_REGEX.match(email.strip()))


def validate_step(step_index: int, record: LeadRecord) -> StepValidation:
    """
    Validate the fields owned by one survey step.

    Optional steps never block. Every other step needs all of its fields
    filled; the contact step also needs a well-formed email.
    Raises IndexError for a step outside the survey.
    """
    step = get_step(step_index)
    if step.optional:
        return VALID

    if any(field.is_blank(record) for field in step.fields):
        return StepValidation(valid=False, message=step.required_message)

    if LeadField.EMAIL in step.fields and not is_valid_email_format(record.personal_info.email):
        return StepValidation(valid=False, message=INVALID_EMAIL_MESSAGE)

    return VALID


# Server-side required fields, in the order errors are reported
_REQUIRED_FIELDS: tuple[tuple[LeadField, str], ...] = (
    (LeadField.FULL_NAME, "Full name is required"),
    (LeadField.EMAIL, "Email is required"),
    (LeadField.PHONE, "Phone number is required"),
    (LeadField.CITY, "City is required"),
    (LeadField.PROVINCE, "Province is required"),
    (LeadField.STREET_ADDRESS, "Street address is required"),
    (LeadField.POSTAL_CODE, "Postal code is required"),
    (LeadField.DATE_OF_BIRTH, "Date of birth is required"),
    (LeadField.COMPANY_NAME, "Company name is required"),
    (LeadField.JOB_TITLE, "Job title is required"),
    (LeadField.VEHICLE_TYPE, "Vehicle type is required"),
    (LeadField.BUDGET, "Budget is required"),
    (LeadField.TRADE_IN, "Trade in preference is required"),
    (LeadField.CREDIT_SCORE, "Credit score is required"),
    (LeadField.EMPLOYMENT, "Employment status is required"),
    (LeadField.EMPLOYMENT_LENGTH, "Employment length is required"),
    (LeadField.INCOME, "Monthly income is required"),
)


def validate_submission(record: LeadRecord) -> list[str]:
    """
    Check a complete record before submission.
    Returns a list of human-readable errors; empty means valid.
    """
    errors = [message for field, message in _REQUIRED_FIELDS if field.is_blank(record)]

    email = record.personal_info.email
    if email.strip() and not is_valid_email_format(email):
        errors.append("Invalid email format")

    return errors
