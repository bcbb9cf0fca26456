"""
Survey endpoints.

- POST /api/submit-survey      - validate a completed lead and fan it out to the sinks
- GET  /api/submit-survey      - which sinks are configured (operational diagnostics)
- GET  /api/v1/survey/steps    - the step catalogue for front ends
- POST /api/v1/survey/validate - run the per-step validator for one step
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from autoquiz.config import Settings, get_settings
from autoquiz.schemas.api_responses import (
    ErrorResponse,
    StepValidationRequest,
    StepValidationResponse,
    SubmitSurveyResponse,
)
from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.services.submission import SubmissionOrchestrator, describe_sinks
from autoquiz.survey.steps import TOTAL_STEPS, steps_catalogue
from autoquiz.survey.validation import validate_step, validate_submission
from autoquiz.utils.masking import mask_email, mask_name

logger = logging.getLogger(__name__)
router = APIRouter(tags=["survey"])

PROCESSING_ERROR = "Failed to process survey submission"


def get_orchestrator(request: Request) -> SubmissionOrchestrator:
    """The orchestrator built once in create_app."""
    return request.app.state.orchestrator


def _error(status_code: int, error: str, details: list[str] | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _format_validation_error(exc: ValidationError) -> list[str]:
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        details.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "Invalid value"))
    return details


@router.post("/api/submit-survey", response_model=SubmitSurveyResponse)
async def submit_survey(
    request: Request,
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
):
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Survey submission body is not valid JSON")
        return _error(500, PROCESSING_ERROR, ["Request body must be valid JSON"])

    try:
        record = LeadRecord.model_validate(payload)
    except ValidationError as e:
        details = _format_validation_error(e)
        logger.info("Survey submission rejected: malformed record (%d errors)", len(details))
        return _error(400, "Validation failed", details)

    errors = validate_submission(record)
    if errors:
        logger.info("Survey submission rejected: %d validation errors", len(errors))
        return _error(400, "Validation failed", errors)

    logger.info(
        "Received survey submission: name=%s email=%s vehicle=%s",
        mask_name(record.personal_info.full_name),
        mask_email(record.personal_info.email),
        record.vehicle_info.vehicle_type,
    )

    try:
        result = await orchestrator.submit(record)
    except Exception:
        logger.exception("Unexpected error processing survey submission")
        return _error(500, PROCESSING_ERROR, ["Unexpected error"])

    if not result.success:
        return _error(500, PROCESSING_ERROR, result.errors or [result.message])

    return SubmitSurveyResponse(
        success=True,
        message=result.message,
        integrations=result.integrations,
    )


@router.get("/api/submit-survey")
async def submit_survey_health(settings: Settings = Depends(get_settings)):
    """Report which sinks are configured. Never exposes credentials."""
    config = {f"{to_camel(name)}Configured": configured for name, configured in describe_sinks(settings).items()}
    config["placesConfigured"] = bool(settings.google_places_api_key)
    return {
        "message": "Survey submission endpoint is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": config,
    }


@router.get("/api/v1/survey/steps")
async def survey_steps():
    return {"totalSteps": TOTAL_STEPS, "steps": steps_catalogue()}


@router.post("/api/v1/survey/validate", response_model=StepValidationResponse)
async def validate_survey_step(body: StepValidationRequest):
    try:
        result = validate_step(body.step, body.record)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return StepValidationResponse(valid=result.valid, message=result.message)
