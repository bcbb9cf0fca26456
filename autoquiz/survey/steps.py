"""
Survey step definitions - the fixed, ordered question list.

Each step declares exactly which typed LeadField(s) it reads and writes, its
input kind, and whether picking an option advances the survey on its own.
Built once at import time and never mutated.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic.alias_generators import to_camel

from autoquiz.schemas.lead_record import Documents, LeadRecord


class InputKind(str, Enum):
    SINGLE_CHOICE = "single_choice"
    TEXT = "text"
    ADDRESS = "address"
    DATE = "date"
    FILE = "file"


class LeadField(Enum):
    """Every writable field of a LeadRecord, as (section attribute, field attribute)."""

    VEHICLE_TYPE = ("vehicle_info", "vehicle_type")
    DESIRED_VEHICLE = ("vehicle_info", "desired_vehicle")
    BUDGET = ("vehicle_info", "budget")
    TRADE_IN = ("vehicle_info", "trade_in")
    CREDIT_SCORE = ("vehicle_info", "credit_score")
    EMPLOYMENT = ("vehicle_info", "employment")
    EMPLOYMENT_LENGTH = ("vehicle_info", "employment_length")
    INCOME = ("vehicle_info", "income")
    COMPANY_NAME = ("personal_info", "company_name")
    JOB_TITLE = ("personal_info", "job_title")
    STREET_ADDRESS = ("personal_info", "street_address")
    CITY = ("personal_info", "city")
    PROVINCE = ("personal_info", "province")
    POSTAL_CODE = ("personal_info", "postal_code")
    DATE_OF_BIRTH = ("personal_info", "date_of_birth")
    FULL_NAME = ("personal_info", "full_name")
    PHONE = ("personal_info", "phone")
    EMAIL = ("personal_info", "email")
    PAY_STUB = ("documents", "pay_stub")

    def __init__(self, section: str, attribute: str):
        self.section = section
        self.attribute = attribute

    @property
    def wire_section(self) -> str:
        return to_camel(self.section)

    @property
    def wire_field(self) -> str:
        return to_camel(self.attribute)

    @property
    def path(self) -> str:
        """camelCase dotted path as the browser names it, e.g. vehicleInfo.budget"""
        return f"{self.wire_section}.{self.wire_field}"

    def get(self, record: LeadRecord) -> Any:
        return getattr(getattr(record, self.section), self.attribute)

    def set(self, record: LeadRecord, value: Any) -> None:
        if self is LeadField.PAY_STUB:
            # Re-run the documents coercion so every uploader format is accepted
            record.documents = Documents.model_validate({"pay_stub": value})
            return
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise TypeError(f"{self.path} expects a string, got {type(value).__name__}")
        setattr(getattr(record, self.section), self.attribute, value)

    def is_blank(self, record: LeadRecord) -> bool:
        value = self.get(record)
        if isinstance(value, str):
            return not value.strip()
        return value is None

    @classmethod
    def resolve(cls, section: str, field: str) -> "LeadField":
        """Look up a field by snake_case or camelCase names. Raises KeyError if unknown."""
        for member in cls:
            if section in (member.section, member.wire_section) and field in (
                member.attribute, member.wire_field,
            ):
                return member
        raise KeyError(f"Unknown survey field: {section}.{field}")


@dataclass(frozen=True)
class StepDefinition:
    index: int
    key: str
    prompt: str
    fields: tuple[LeadField, ...]
    kind: InputKind
    required_message: str = ""
    options: tuple[str, ...] = ()
    auto_advance: bool = False
    optional: bool = False

    def owns(self, field: LeadField) -> bool:
        return field in self.fields

    def accepts_option(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.options


VEHICLE_TYPES = ("Car", "SUV", "Truck", "Sedan")
BUDGETS = ("Under $400", "$400-499", "$500-600", "Over $600")
TRADE_IN_OPTIONS = ("Yes", "No", "Unsure")
CREDIT_SCORES = (
    "Excellent (760-900)",
    "Very Good (725-759)",
    "Good (660-724)",
    "Fair (600-659)",
    "Poor (300-599)",
    "No Credit / Unsure",
)
EMPLOYMENT_STATUSES = ("Employed", "Self-Employed", "Student", "Retired/Pension", "Other")
MONTHLY_INCOMES = ("$2000-$2500", "$2501-$3500", "$3501-$4500", "$4500+")
EMPLOYMENT_LENGTHS = ("Less than 3 Months", "3 Months-2 Years", "2+ Years")


def _choice(index: int, key: str, prompt: str, field: LeadField, options: tuple[str, ...], message: str) -> StepDefinition:
    return StepDefinition(
        index=index,
        key=key,
        prompt=prompt,
        fields=(field,),
        kind=InputKind.SINGLE_CHOICE,
        options=options,
        auto_advance=True,
        required_message=message,
    )


STEPS: tuple[StepDefinition, ...] = (
    _choice(0, "vehicle_type", "What type of vehicle are you looking for?",
            LeadField.VEHICLE_TYPE, VEHICLE_TYPES, "Please select a vehicle type"),
    StepDefinition(
        index=1,
        key="desired_vehicle",
        prompt="Find a specific vehicle? (Ex: 2020 Honda Civic)",
        fields=(LeadField.DESIRED_VEHICLE,),
        kind=InputKind.TEXT,
        optional=True,
    ),
    _choice(2, "budget", "What is your budget?",
            LeadField.BUDGET, BUDGETS, "Please select your budget"),
    _choice(3, "trade_in", "Do you have a trade-in?",
            LeadField.TRADE_IN, TRADE_IN_OPTIONS, "Please select a trade-in option"),
    _choice(4, "credit_score", "What is your estimated credit rating?",
            LeadField.CREDIT_SCORE, CREDIT_SCORES, "Please select your estimated credit rating"),
    _choice(5, "employment", "What is your employment status?",
            LeadField.EMPLOYMENT, EMPLOYMENT_STATUSES, "Please select your employment status"),
    _choice(6, "income", "What is your monthly income?",
            LeadField.INCOME, MONTHLY_INCOMES, "Please select your monthly income"),
    _choice(7, "employment_length", "How long have you been employed at your current job?",
            LeadField.EMPLOYMENT_LENGTH, EMPLOYMENT_LENGTHS,
            "Please select how long you have been employed"),
    StepDefinition(
        index=8,
        key="employer",
        prompt="Where do you work?",
        fields=(LeadField.COMPANY_NAME, LeadField.JOB_TITLE),
        kind=InputKind.TEXT,
        required_message="Please enter your company name and job title",
    ),
    StepDefinition(
        index=9,
        key="address",
        prompt="What is your address?",
        fields=(LeadField.STREET_ADDRESS, LeadField.CITY, LeadField.PROVINCE, LeadField.POSTAL_CODE),
        kind=InputKind.ADDRESS,
        required_message="Please complete all address fields",
    ),
    StepDefinition(
        index=10,
        key="date_of_birth",
        prompt="What is your date of birth?",
        fields=(LeadField.DATE_OF_BIRTH,),
        kind=InputKind.DATE,
        required_message="Please select your date of birth",
    ),
    StepDefinition(
        index=11,
        key="contact",
        prompt="How can we reach you?",
        fields=(LeadField.FULL_NAME, LeadField.PHONE, LeadField.EMAIL),
        kind=InputKind.TEXT,
        required_message="Please fill in your name, phone number and email",
    ),
    StepDefinition(
        index=12,
        key="pay_stub",
        prompt="Speed up your approval! Upload a recent pay stub (optional)",
        fields=(LeadField.PAY_STUB,),
        kind=InputKind.FILE,
        optional=True,
    ),
)

TOTAL_STEPS = len(STEPS)
LAST_STEP = TOTAL_STEPS - 1


def get_step(index: int) -> StepDefinition:
    """Return the step at *index*. Raises IndexError outside the survey."""
    if not 0 <= index < TOTAL_STEPS:
        raise IndexError(f"Survey step {index} out of range 0..{LAST_STEP}")
    return STEPS[index]


def step_for_field(field: LeadField) -> Optional[StepDefinition]:
    for step in STEPS:
        if step.owns(field):
            return step
    return None


def steps_catalogue() -> list[dict]:
    """JSON-ready description of the survey, for front ends."""
    return [
        {
            "index": step.index,
            "key": step.key,
            "prompt": step.prompt,
            "fields": [field.path for field in step.fields],
            "kind": step.kind.value,
            "options": list(step.options),
            "autoAdvance": step.auto_advance,
            "optional": step.optional,
        }
        for step in STEPS
    ]
