"""
Test configuration and fixtures.
No network: sinks are fakes or have httpx.AsyncClient patched per test.
"""
import base64
from typing import Mapping, Optional

import pytest

from autoquiz.config import Settings
from autoquiz.integrations.sink_base import LeadSink, SinkOutcome
from autoquiz.schemas.lead_record import LeadRecord

PAY_STUB_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
PAY_STUB_DATA_URL = "data:image/jpeg;base64," + base64.b64encode(PAY_STUB_BYTES).decode("ascii")


def complete_record_payload() -> dict:
    """A fully filled-in survey, as the browser posts it."""
    return {
        "personalInfo": {
            "fullName": "Jane Doe",
            "email": "jane.doe@example.com",
            "phone": "4165550123",
            "streetAddress": "123 King St W",
            "city": "Toronto",
            "province": "ON",
            "postalCode": "M5H 1A1",
            "dateOfBirth": "1990-04-12",
            "companyName": "Maple Logistics",
            "jobTitle": "Dispatcher",
        },
        "vehicleInfo": {
            "vehicleType": "SUV",
            "desiredVehicle": "2021 Toyota RAV4",
            "budget": "$400-499",
            "tradeIn": "No",
            "creditScore": "Good (660-724)",
            "employment": "Employed",
            "employmentLength": "2+ Years",
            "income": "$3501-$4500",
        },
        "documents": {"payStub": None},
    }


@pytest.fixture
def record_payload() -> dict:
    return complete_record_payload()


@pytest.fixture
def complete_record() -> LeadRecord:
    return LeadRecord.model_validate(complete_record_payload())


@pytest.fixture
def record_with_pay_stub() -> LeadRecord:
    payload = complete_record_payload()
    payload["documents"] = {
        "payStub": {
            "original": PAY_STUB_DATA_URL,
            "compressed": None,
            "filename": "march-stub.jpg",
            "size": len(PAY_STUB_BYTES),
        }
    }
    return LeadRecord.model_validate(payload)


@pytest.fixture
def settings() -> Settings:
    """Settings with nothing configured and no .env file read."""
    return Settings(_env_file=None)


class FakeSink(LeadSink):
    """In-memory sink: records what it received and returns a fixed outcome."""

    def __init__(self, name: str, ok: bool = True, error: Optional[str] = None, raises: Optional[Exception] = None):
        self.name = name
        self.ok = ok
        self.error = error
        self.raises = raises
        self.calls: list[tuple[LeadRecord, dict]] = []

    async def send(self, record: LeadRecord, prior: Optional[Mapping[str, bool]] = None) -> SinkOutcome:
        self.calls.append((record, dict(prior or {})))
        if self.raises:
            raise self.raises
        return SinkOutcome(sink=self.name, ok=self.ok, error=None if self.ok else (self.error or "down"))


@pytest.fixture
def fake_sink():
    return FakeSink


@pytest.fixture
def pay_stub_bytes() -> bytes:
    return PAY_STUB_BYTES


@pytest.fixture
def pay_stub_data_url() -> str:
    return PAY_STUB_DATA_URL
