"""
Tests for autoquiz/schemas/lead_record.py - wire format, pay stub shapes, flattening.
"""
import json

import pytest
from pydantic import ValidationError

from autoquiz.schemas.lead_record import LeadRecord, PayStub


class TestLeadRecordParsing:
    def test_empty_record_has_blank_strings(self):
        record = LeadRecord()
        assert record.personal_info.full_name == ""
        assert record.vehicle_info.budget == ""
        assert record.documents.pay_stub is None

    def test_camel_case_payload(self, complete_record):
        assert complete_record.personal_info.full_name == "Jane Doe"
        assert complete_record.vehicle_info.credit_score == "Good (660-724)"
        assert complete_record.personal_info.postal_code == "M5H 1A1"

    def test_snake_case_payload_accepted(self):
        record = LeadRecord.model_validate({"personal_info": {"full_name": "Sam Lee"}})
        assert record.personal_info.full_name == "Sam Lee"

    def test_null_fields_become_blank(self):
        record = LeadRecord.model_validate({"personalInfo": {"email": None}, "vehicleInfo": {"budget": None}})
        assert record.personal_info.email == ""
        assert record.vehicle_info.budget == ""

    def test_deprecated_fields_ignored(self, record_payload):
        payload = record_payload
        payload["vehicleInfo"]["preferences"] = ["AWD"]
        payload["vehicleInfo"]["timeframe"] = "ASAP"
        payload["personalInfo"]["firstName"] = "Jane"
        record = LeadRecord.model_validate(payload)
        assert "preferences" not in record.to_payload()["vehicleInfo"]
        assert "firstName" not in record.to_payload()["personalInfo"]

    def test_non_string_field_rejected(self):
        with pytest.raises(ValidationError):
            LeadRecord.model_validate({"personalInfo": {"phone": ["416"]}})

    def test_to_payload_round_trip_is_identical(self, complete_record):
        again = LeadRecord.model_validate(complete_record.to_payload())
        assert again == complete_record

    def test_name_split(self, complete_record):
        assert complete_record.personal_info.first_name == "Jane"
        assert complete_record.personal_info.last_name == "Doe"

    def test_name_split_single_word(self):
        record = LeadRecord.model_validate({"personalInfo": {"fullName": "Cher"}})
        assert record.personal_info.first_name == "Cher"
        assert record.personal_info.last_name == ""


class TestPayStub:
    def test_object_form(self, record_with_pay_stub, pay_stub_bytes):
        stub = record_with_pay_stub.documents.pay_stub
        assert stub.filename == "march-stub.jpg"
        assert stub.size == len(pay_stub_bytes)

    def test_legacy_bare_data_url(self, pay_stub_data_url):
        record = LeadRecord.model_validate({"documents": {"payStub": pay_stub_data_url}})
        stub = record.documents.pay_stub
        assert stub.original == pay_stub_data_url
        assert stub.filename == "paystub.jpg"
        assert stub.size == 0

    def test_json_string_form(self, pay_stub_data_url):
        encoded = json.dumps({"original": pay_stub_data_url, "filename": "stub.png", "size": 10})
        record = LeadRecord.model_validate({"documents": {"payStub": encoded}})
        assert record.documents.pay_stub.filename == "stub.png"

    def test_blank_string_means_no_stub(self):
        record = LeadRecord.model_validate({"documents": {"payStub": ""}})
        assert record.documents.pay_stub is None

    def test_garbage_string_rejected(self):
        with pytest.raises(ValidationError):
            LeadRecord.model_validate({"documents": {"payStub": "not json"}})

    def test_negative_size_rejected(self, pay_stub_data_url):
        with pytest.raises(ValidationError):
            PayStub(original=pay_stub_data_url, size=-1)

    def test_decode(self, record_with_pay_stub, pay_stub_bytes):
        content, mime = record_with_pay_stub.documents.pay_stub.decode()
        assert content == pay_stub_bytes
        assert mime == "image/jpeg"

    def test_decode_rejects_non_data_url(self):
        with pytest.raises(ValueError):
            PayStub(original="https://example.com/stub.jpg").decode()


class TestFlatFields:
    def test_flat_fields_camel_case(self, complete_record):
        flat = complete_record.to_flat_fields()
        assert flat["fullName"] == "Jane Doe"
        assert flat["vehicleType"] == "SUV"
        assert "payStubFilename" not in flat

    def test_flat_fields_include_pay_stub_metadata_only(self, record_with_pay_stub, pay_stub_bytes, pay_stub_data_url):
        flat = record_with_pay_stub.to_flat_fields(include_documents=True)
        assert flat["payStubFilename"] == "march-stub.jpg"
        assert flat["payStubSize"] == str(len(pay_stub_bytes))
        assert pay_stub_data_url not in flat.values()
