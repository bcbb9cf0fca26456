"""
Lead record - the single aggregate a survey session builds up and submits.

The browser posts camelCase JSON (personalInfo, vehicleInfo, documents.payStub);
Python code works with snake_case attributes. Both spellings validate.
"""
import base64
import json
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)

LEGACY_PAY_STUB_FILENAME = "paystub.jpg"


class _SurveySection(BaseModel):
    """Shared config for the string-only record sections."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_blank(cls, value):
        # Untouched inputs arrive as null from some clients
        return "" if value is None else value


class PersonalInfo(_SurveySection):
    """Applicant identity, contact and employer details."""
    full_name: str = ""
    email: str = ""
    phone: str = ""
    street_address: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    date_of_birth: str = ""
    company_name: str = ""
    job_title: str = ""

    @property
    def first_name(self) -> str:
        parts = self.full_name.split()
        return parts[0] if parts else ""

    @property
    def last_name(self) -> str:
        parts = self.full_name.split()
        return " ".join(parts[1:])


class VehicleInfo(_SurveySection):
    """Vehicle wishes and the financial answers used to qualify the lead."""
    vehicle_type: str = ""
    desired_vehicle: str = ""
    budget: str = ""
    trade_in: str = ""
    credit_score: str = ""
    employment: str = ""
    employment_length: str = ""
    income: str = ""


class PayStub(BaseModel):
    """Uploaded pay stub: a base64 data URL plus its original file metadata."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    original: str
    compressed: Optional[str] = None
    filename: str = LEGACY_PAY_STUB_FILENAME
    size: int = Field(default=0, ge=0)

    def decode(self) -> tuple[bytes, str]:
        """
        Decode the data URL into raw bytes.

        Returns: (content, mime_type)
        Raises: ValueError if the payload is not a base64 data URL.
        """
        match = _DATA_URL_RE.match(self.original.strip())
        if not match:
            raise ValueError("Pay stub is not a base64 data URL")
        # binascii.Error is a ValueError subclass
        content = base64.b64decode(match.group("data"), validate=True)
        return content, match.group("mime")


class Documents(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    pay_stub: Optional[PayStub] = None

    @field_validator("pay_stub", mode="before")
    @classmethod
    def _coerce_pay_stub(cls, value):
        """
        Accept every shape the uploader has produced:
        an object, its JSON-encoded string, a bare data URL (legacy), or blank.
        """
        if value is None or value == "":
            return None
        if isinstance(value, str):
            if value.startswith("data:"):
                return {"original": value, "filename": LEGACY_PAY_STUB_FILENAME, "size": 0}
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("payStub must be a JSON object or a data URL")
        return value


class LeadRecord(BaseModel):
    """
    The complete survey submission. Shape is fixed; unknown keys sent by older
    clients (preferences, timeframe, firstName/lastName) are ignored.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    vehicle_info: VehicleInfo = Field(default_factory=VehicleInfo)
    documents: Documents = Field(default_factory=Documents)

    def to_payload(self) -> dict:
        """Serialize to the camelCase JSON body the submission endpoint accepts."""
        return self.model_dump(by_alias=True)

    def to_flat_fields(self, include_documents: bool = False) -> dict[str, str]:
        """
        Flatten to camelCase field -> string. Pay stub content is never included,
        only its filename/size when asked for.
        """
        flat: dict[str, str] = {}
        flat.update(self.personal_info.model_dump(by_alias=True))
        flat.update(self.vehicle_info.model_dump(by_alias=True))
        if include_documents and self.documents.pay_stub:
            flat["payStubFilename"] = self.documents.pay_stub.filename
            flat["payStubSize"] = str(self.documents.pay_stub.size)
        return flat
