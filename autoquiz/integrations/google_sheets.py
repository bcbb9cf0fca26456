"""
Google Sheets lead log - appends one row per submitted lead.

Uses the Sheets API v4 values:append call. The access token comes from a
service-account key via google-auth and is cached on the sink until it expires.
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Mapping, Optional
from urllib.parse import quote

import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from autoquiz.integrations.sink_base import DEFAULT_TIMEOUT, LeadSink, SinkOutcome
from autoquiz.schemas.lead_record import LeadRecord

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"


class GoogleSheetsSink(LeadSink):
    """Google Sheets as an append-only lead log."""

    name = "google_sheets"

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_json: str,
        sheet_range: str = "Leads!A1",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.credentials_json = credentials_json
        self.sheet_range = sheet_range
        self.timeout = timeout
        self._credentials = None

    @property
    def configured(self) -> bool:
        return bool(self.spreadsheet_id and self.credentials_json)

    def _load_credentials(self):
        info = json.loads(self.credentials_json)
        return service_account.Credentials.from_service_account_info(info, scopes=[SHEETS_SCOPE])

    async def _get_access_token(self) -> str:
        if self._credentials is None:
            self._credentials = self._load_credentials()
        if not self._credentials.valid:
            credentials = self._credentials
            # google-auth refresh is a blocking HTTP call
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, lambda: credentials.refresh(GoogleAuthRequest()))
        return self._credentials.token

    @staticmethod
    def build_row(record: LeadRecord, submitted_at: datetime) -> list[str]:
        info = record.personal_info
        vehicle = record.vehicle_info
        pay_stub = record.documents.pay_stub
        return [
            submitted_at.isoformat(),
            info.full_name,
            info.email,
            info.phone,
            info.street_address,
            info.city,
            info.province,
            info.postal_code,
            info.date_of_birth,
            info.company_name,
            info.job_title,
            vehicle.vehicle_type,
            vehicle.desired_vehicle,
            vehicle.budget,
            vehicle.trade_in,
            vehicle.credit_score,
            vehicle.employment,
            vehicle.employment_length,
            vehicle.income,
            pay_stub.filename if pay_stub else "",
        ]

    async def _append_row(self, token: str, values: list[str]) -> httpx.Response:
        url = f"{SHEETS_API_URL}/{self.spreadsheet_id}/values/{quote(self.sheet_range, safe='!:')}:append"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(
                url,
                params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
                headers={"Authorization": f"Bearer {token}"},
                json={"values": [values]},
            )

    async def send(
        self,
        record: LeadRecord,
        prior: Optional[Mapping[str, bool]] = None,
    ) -> SinkOutcome:
        if not self.configured:
            return SinkOutcome(sink=self.name, ok=False, error="Google Sheets not configured")

        try:
            token = await self._get_access_token()
            row = self.build_row(record, datetime.now(timezone.utc))
            response = await self._append_row(token, row)
        except Exception as e:
            logger.error("Google Sheets append failed: %s", str(e), extra={"sink": self.name})
            return SinkOutcome(sink=self.name, ok=False, error=str(e), attempts=["append"])

        if not response.is_success:
            logger.error(
                "Google Sheets append rejected: HTTP %d %s",
                response.status_code, response.text[:200],
                extra={"sink": self.name, "status_code": response.status_code},
            )
            return SinkOutcome(
                sink=self.name, ok=False, error=f"HTTP {response.status_code}", attempts=["append"],
            )

        logger.info("Google Sheets row appended to %s/%s", self.spreadsheet_id[:8], self.sheet_range)
        return SinkOutcome(sink=self.name, ok=True, attempts=["append"])
