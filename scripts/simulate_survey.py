"""
Walk through the survey in the terminal and submit the result.

Usage:
    python scripts/simulate_survey.py --auto
    python scripts/simulate_survey.py                      # answer each step yourself
    python scripts/simulate_survey.py --auto --base-url http://localhost:8000
"""
import argparse
import asyncio
import logging

import httpx

from autoquiz.survey.controller import SurveyController, Transition
from autoquiz.survey.steps import TOTAL_STEPS, InputKind, LeadField

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_URL = "http://localhost:8000"

SAMPLE_ANSWERS: dict[LeadField, str] = {
    LeadField.VEHICLE_TYPE: "SUV",
    LeadField.DESIRED_VEHICLE: "2021 Toyota RAV4",
    LeadField.BUDGET: "$400-499",
    LeadField.TRADE_IN: "No",
    LeadField.CREDIT_SCORE: "Good (660-724)",
    LeadField.EMPLOYMENT: "Employed",
    LeadField.INCOME: "$3501-$4500",
    LeadField.EMPLOYMENT_LENGTH: "2+ Years",
    LeadField.COMPANY_NAME: "Maple Logistics",
    LeadField.JOB_TITLE: "Dispatcher",
    LeadField.STREET_ADDRESS: "123 King St W",
    LeadField.CITY: "Toronto",
    LeadField.PROVINCE: "ON",
    LeadField.POSTAL_CODE: "M5H 1A1",
    LeadField.DATE_OF_BIRTH: "1990-04-12",
    LeadField.FULL_NAME: "Jane Doe",
    LeadField.PHONE: "4165550123",
    LeadField.EMAIL: "jane.doe@example.com",
}


def _ask(field: LeadField, options: tuple[str, ...]) -> str:
    if options:
        for number, option in enumerate(options, start=1):
            print(f"  {number}. {option}")
        answer = input(f"{field.path} [1-{len(options)}]: ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        return answer
    return input(f"{field.path}: ").strip()


def run_survey(auto: bool) -> SurveyController:
    """Drive a SurveyController to completion, from sample answers or stdin."""
    survey = SurveyController()

    while not survey.is_complete():
        step = survey.step
        print(f"\nStep {step.index + 1}/{TOTAL_STEPS} ({survey.progress:.0%}): {step.prompt}")
        if survey.validation_error:
            print(f"  ! {survey.validation_error}")

        transition = None
        for field in step.fields:
            if step.kind is InputKind.FILE:
                continue
            value = SAMPLE_ANSWERS.get(field, "") if auto else _ask(field, step.options)
            transition = survey.set_field(field, value)

        if transition is None:
            transition = survey.go_next()
        if transition is Transition.REJECTED and auto:
            raise RuntimeError(f"Sample answers rejected at step {step.index}: {survey.validation_error}")

    return survey


async def submit(survey: SurveyController, base_url: str) -> httpx.Response:
    async with httpx.AsyncClient(timeout=30) as client:
        resp = await client.post(f"{base_url}/api/submit-survey", json=survey.record.to_payload())
        logger.info("Submit response: %s %s", resp.status_code, resp.json())
        return resp


async def main():
    parser = argparse.ArgumentParser(description="Complete the survey and submit the lead")
    parser.add_argument("--auto", action="store_true", help="Use built-in sample answers")
    parser.add_argument("--base-url", default=BASE_URL)
    args = parser.parse_args()

    survey = run_survey(args.auto)
    logger.info("Survey complete after %d rejected steps, submitting...", survey.rejections)
    await submit(survey, args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
