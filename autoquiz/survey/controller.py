"""
Survey controller - the per-session state machine.

States are the step indexes 0..N-1 plus Complete. The controller owns one
LeadRecord, the step cursor and a single validation-error slot. Nothing here
does I/O; once complete, the record is handed to the submission orchestrator.
"""
import logging
from enum import Enum
from typing import Any, Optional

from autoquiz.schemas.lead_record import LeadRecord
from autoquiz.schemas.places import AddressFields
from autoquiz.survey.steps import LAST_STEP, TOTAL_STEPS, LeadField, StepDefinition, get_step
from autoquiz.survey.validation import validate_step

logger = logging.getLogger(__name__)


class Transition(str, Enum):
    ADVANCED = "advanced"
    COMPLETED = "completed"
    REJECTED = "rejected"


class SurveyController:
    """Drives one applicant through the ordered survey steps."""

    def __init__(self, record: Optional[LeadRecord] = None):
        self._record = record or LeadRecord()
        self._current_step = 0
        self._validation_error: Optional[str] = None
        self._complete = False
        # Bumped on every refused "Next" so the UI can play its shake cue
        self.rejections = 0

    @property
    def record(self) -> LeadRecord:
        return self._record

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def step(self) -> StepDefinition:
        return get_step(self._current_step)

    @property
    def validation_error(self) -> Optional[str]:
        return self._validation_error

    @property
    def progress(self) -> float:
        if self._complete:
            return 1.0
        return (self._current_step + 1) / TOTAL_STEPS

    def is_complete(self) -> bool:
        return self._complete

    def update_field(self, section: str, field: str, value: Any) -> Optional[Transition]:
        """
        Write a value addressed by section/field name (camelCase or snake_case).
        Raises KeyError for a field the record does not have.
        """
        return self.set_field(LeadField.resolve(section, field), value)

    def set_field(self, field: LeadField, value: Any) -> Optional[Transition]:
        """
        Write one field and clear any pending error.

        Picking an option on an auto-advance step moves on immediately; the
        selection is the step's only requirement, so no validation runs.
        Returns the transition taken, or None if the cursor did not move.
        Once complete the record belongs to the submission and is left alone.
        """
        if self._complete:
            return None

        field.set(self._record, value)
        self._validation_error = None

        step = self.step
        if step.auto_advance and step.owns(field) and step.accepts_option(value):
            return self._advance()
        return None

    def apply_address(self, address: AddressFields) -> None:
        """Fill the address step from a selected autocomplete suggestion."""
        if self._complete:
            return
        LeadField.STREET_ADDRESS.set(self._record, address.street_address)
        LeadField.CITY.set(self._record, address.city)
        LeadField.PROVINCE.set(self._record, address.province)
        LeadField.POSTAL_CODE.set(self._record, address.postal_code)
        self._validation_error = None

    def go_next(self) -> Transition:
        if self._complete:
            return Transition.COMPLETED

        result = validate_step(self._current_step, self._record)
        if not result.valid:
            self._validation_error = result.message
            self.rejections += 1
            logger.debug("Step %d rejected: %s", self._current_step, result.message)
            return Transition.REJECTED

        return self._advance()

    def go_previous(self) -> None:
        if self._complete:
            return
        if self._current_step > 0:
            self._current_step -= 1
        self._validation_error = None

    def _advance(self) -> Transition:
        self._validation_error = None
        if self._current_step >= LAST_STEP:
            self._complete = True
            return Transition.COMPLETED
        self._current_step += 1
        return Transition.ADVANCED
