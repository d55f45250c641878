"""Google Sheets persistence for submissions, help requests and team workflows."""

import asyncio
import json
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from innovators.logging_config import get_logger
from innovators.schemas.sheets import (
    HelpRequestRecord,
    InnovatorEntry,
    NewSubmission,
    SubmissionRecord,
    SubmissionStatus,
)

logger = get_logger("sheets_service")

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

SUBMISSIONS_TAB = "Submissions"
HELP_REQUESTS_TAB = "Help Requests"
WORKFLOWS_TAB = "Workflows"

SUBMISSIONS_RANGE = f"{SUBMISSIONS_TAB}!A:J"
HELP_REQUESTS_RANGE = f"'{HELP_REQUESTS_TAB}'!A:F"
WORKFLOWS_RANGE = f"{WORKFLOWS_TAB}!A:C"
STATUS_COLUMN = "H"

# Row 1 is the header, so data row i (0-based) lives at sheet row i + 2.
FIRST_DATA_ROW = 2

DEFAULT_CACHE_SECONDS = 5 * 60


def _cell(row: list, index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index]).strip()
    return ""


def parse_submission_row(row: list, row_number: int) -> SubmissionRecord:
    """Columns: timestamp, user name, problem, solution, time saved, reusable by,
    polished summary, status, user id, how to reuse."""
    return SubmissionRecord(
        row_number=row_number,
        timestamp=_cell(row, 0),
        user_name=_cell(row, 1),
        problem=_cell(row, 2),
        solution=_cell(row, 3),
        time_saved=_cell(row, 4),
        reusable_by=_cell(row, 5),
        polished_summary=_cell(row, 6),
        status=_cell(row, 7).lower() or SubmissionStatus.PENDING.value,
        user_id=_cell(row, 8) or None,
        how_to_reuse=_cell(row, 9),
    )


def parse_submission_rows(rows: list[list]) -> list[SubmissionRecord]:
    data_rows = rows[1:] if rows else []
    return [parse_submission_row(row, index + FIRST_DATA_ROW) for index, row in enumerate(data_rows) if row]


def parse_workflow_rows(rows: list[list]) -> dict[str, list[str]]:
    workflows: dict[str, list[str]] = {}
    for row in rows[1:] if rows else []:
        team, workflow = _cell(row, 0), _cell(row, 1)
        if team and workflow:
            workflows.setdefault(team, []).append(workflow)
    return workflows


def build_sheets_client(credentials_json: str):
    """Build a Sheets v4 resource from service-account JSON, or None if unconfigured."""
    if not credentials_json:
        return None
    try:
        info = json.loads(credentials_json)
    except json.JSONDecodeError:
        logger.error("GOOGLE_CREDENTIALS is not valid JSON")
        return None
    if not isinstance(info, dict) or not info.get("client_email"):
        logger.warning("Google Sheets not configured - skipping")
        return None

    credentials = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


class SheetsService:
    """Async facade over the blocking Google API client.

    Calls run in a worker thread. Without a client or spreadsheet id, writes
    are skipped and reads come back empty.
    """

    def __init__(
        self,
        client: Any,
        spreadsheet_id: str,
        cache_seconds: int = DEFAULT_CACHE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self.cache_seconds = cache_seconds
        self._clock = clock
        self._approved_cache: Optional[list[SubmissionRecord]] = None
        self._cache_loaded_at = 0.0

    @classmethod
    def from_credentials(
        cls, credentials_json: str, spreadsheet_id: str, cache_seconds: int = DEFAULT_CACHE_SECONDS
    ) -> "SheetsService":
        return cls(build_sheets_client(credentials_json), spreadsheet_id, cache_seconds)

    @property
    def configured(self) -> bool:
        return self.client is not None and bool(self.spreadsheet_id)

    def _values(self):
        return self.client.spreadsheets().values()

    async def _get_rows(self, range_: str) -> list[list]:
        def _call():
            return self._values().get(spreadsheetId=self.spreadsheet_id, range=range_).execute()

        result = await asyncio.to_thread(_call)
        return result.get("values", [])

    async def _append_rows(self, range_: str, rows: list[list]) -> None:
        def _call():
            return (
                self._values()
                .append(
                    spreadsheetId=self.spreadsheet_id,
                    range=range_,
                    valueInputOption="USER_ENTERED",
                    insertDataOption="INSERT_ROWS",
                    body={"values": rows},
                )
                .execute()
            )

        await asyncio.to_thread(_call)

    async def _update_rows(self, range_: str, rows: list[list]) -> None:
        def _call():
            return (
                self._values()
                .update(
                    spreadsheetId=self.spreadsheet_id,
                    range=range_,
                    valueInputOption="USER_ENTERED",
                    body={"values": rows},
                )
                .execute()
            )

        await asyncio.to_thread(_call)

    def invalidate_cache(self) -> None:
        self._approved_cache = None
        self._cache_loaded_at = 0.0

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    async def append_submission(self, submission: NewSubmission) -> bool:
        if not self.configured:
            logger.warning("Sheets not configured, submission not persisted")
            return True

        row = [
            self._now_iso(),
            submission.user_name or submission.user_id,
            submission.problem,
            submission.solution,
            submission.time_saved,
            submission.reusable_by,
            submission.polished_summary,
            SubmissionStatus.PENDING.value,
            submission.user_id,
            submission.how_to_reuse,
        ]
        try:
            await self._append_rows(SUBMISSIONS_RANGE, [row])
        except Exception as e:
            logger.error(
                f"Failed to log submission: {e}",
                extra={"context": {"user_id": submission.user_id}},
            )
            return False

        logger.info("Submission logged", extra={"context": {"user_id": submission.user_id}})
        return True

    async def append_help_request(self, request: HelpRequestRecord) -> bool:
        if not self.configured:
            return True

        row = [
            self._now_iso(),
            request.user_name or request.user_id,
            request.challenge,
            request.department or "Unspecified",
            request.user_id,
            request.note,
        ]
        try:
            await self._append_rows(HELP_REQUESTS_RANGE, [row])
        except Exception as e:
            logger.error(f"Failed to log help request: {e}", extra={"context": {"user_id": request.user_id}})
            return False
        return True

    async def _read_submissions(self) -> list[SubmissionRecord]:
        return parse_submission_rows(await self._get_rows(SUBMISSIONS_RANGE))

    async def get_approved_submissions(self) -> list[SubmissionRecord]:
        if self._approved_cache is not None and self._clock() - self._cache_loaded_at < self.cache_seconds:
            return self._approved_cache
        if not self.configured:
            return []

        try:
            submissions = await self._read_submissions()
        except Exception as e:
            logger.error(f"Failed to read submissions: {e}")
            return self._approved_cache or []

        approved = [s for s in submissions if s.is_approved]
        self._approved_cache = approved
        self._cache_loaded_at = self._clock()
        logger.info(f"Loaded {len(approved)} approved submissions")
        return approved

    async def get_pending_submissions(self) -> list[SubmissionRecord]:
        if not self.configured:
            return []
        try:
            submissions = await self._read_submissions()
        except Exception as e:
            logger.error(f"Failed to read pending submissions: {e}")
            return []
        return [s for s in submissions if s.is_pending]

    async def get_submission_by_row(self, row_number: int) -> Optional[SubmissionRecord]:
        if not self.configured or row_number < FIRST_DATA_ROW:
            return None
        try:
            rows = await self._get_rows(f"{SUBMISSIONS_TAB}!A{row_number}:J{row_number}")
        except Exception as e:
            logger.error(f"Failed to get submission: {e}", extra={"context": {"row": row_number}})
            return None
        if not rows or not rows[0]:
            return None
        return parse_submission_row(rows[0], row_number)

    async def update_submission_status(self, row_number: int, status: SubmissionStatus) -> bool:
        if not self.configured:
            return False
        try:
            await self._update_rows(f"{SUBMISSIONS_TAB}!{STATUS_COLUMN}{row_number}", [[SubmissionStatus(status).value]])
        except Exception as e:
            logger.error(f"Failed to update submission status: {e}", extra={"context": {"row": row_number}})
            return False

        self.invalidate_cache()
        logger.info(f"Updated submission row {row_number} to status: {SubmissionStatus(status).value}")
        return True

    async def get_innovators(self) -> dict[str, list[InnovatorEntry]]:
        """Approved submissions grouped by submitter name."""
        innovators: dict[str, list[InnovatorEntry]] = {}
        for submission in await self.get_approved_submissions():
            innovators.setdefault(submission.user_name or "Unknown", []).append(
                InnovatorEntry(
                    problem=submission.problem,
                    solution=submission.solution,
                    time_saved=submission.time_saved,
                    timestamp=submission.timestamp,
                )
            )
        return innovators

    async def get_workflows(self) -> dict[str, list[str]]:
        if not self.configured:
            return {}
        try:
            return parse_workflow_rows(await self._get_rows(WORKFLOWS_RANGE))
        except Exception as e:
            logger.error(f"Failed to read workflows: {e}")
            return {}

    async def seed_workflows(self, workflows: dict[str, list[str]]) -> int:
        """Append every configured team workflow to the Workflows tab. Returns rows written."""
        if not self.configured:
            return 0

        rows = [[team, workflow, "config"] for team, items in workflows.items() for workflow in items]
        if not rows:
            return 0
        try:
            await self._append_rows(WORKFLOWS_RANGE, rows)
        except Exception as e:
            logger.error(f"Failed to seed workflows: {e}")
            return 0

        logger.info(f"Seeded {len(rows)} workflows")
        return len(rows)
