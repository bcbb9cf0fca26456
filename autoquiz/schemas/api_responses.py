"""
API request/response schemas for the survey, places and health endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field

from autoquiz.schemas.lead_record import LeadRecord


class SubmitSurveyResponse(BaseModel):
    success: bool
    message: str
    integrations: dict[str, bool] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[list[str]] = None


class StepValidationRequest(BaseModel):
    step: int
    record: LeadRecord = Field(default_factory=LeadRecord)


class StepValidationResponse(BaseModel):
    valid: bool
    message: Optional[str] = None
