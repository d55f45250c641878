from typing import Optional

import pytest

from innovators.config import Settings
from innovators.container import assemble_container
from innovators.schemas.sheets import HelpRequestRecord, NewSubmission, SubmissionRecord, SubmissionStatus
from innovators.services.company_context import CompanyContext, Tool, load_company_context
from innovators.services.conversation_service import AccessPolicy, ConversationRouter
from innovators.services.flows import FlowContext
from innovators.services.kv_store import MemoryBackend
from innovators.services.result import Result
from innovators.services.session_store import SessionStore

SIGNING_SECRET = "test-signing-secret"
ADMIN_ID = "UADMIN"


class FakeSlack:
    """Records outbound Slack calls."""

    def __init__(self):
        self.direct_messages: list[tuple[str, str]] = []
        self.channel_posts: list[str] = []
        self.reactions: list[tuple[str, str, str]] = []
        self.admin_notifications: list[tuple[str, str]] = []
        self.pending_reminders: list[int] = []
        self.display_names: dict[str, str] = {}
        self.post_ok = True

    async def send_direct_message(self, user_id: str, text: str) -> bool:
        self.direct_messages.append((user_id, text))
        return True

    async def post_to_channel(self, text: str, channel_id: Optional[str] = None) -> bool:
        self.channel_posts.append(text)
        return self.post_ok

    async def get_user_display_name(self, user_id: str) -> Optional[str]:
        return self.display_names.get(user_id)

    async def add_reaction(self, channel: str, timestamp: str, name: str = "eyes") -> bool:
        self.reactions.append(("add", channel, timestamp))
        return True

    async def remove_reaction(self, channel: str, timestamp: str, name: str = "eyes") -> bool:
        self.reactions.append(("remove", channel, timestamp))
        return True

    async def notify_admin(self, submitter_id: str, polished_summary: str) -> bool:
        self.admin_notifications.append((submitter_id, polished_summary))
        return True

    async def send_pending_reminder(self, pending_count: int) -> bool:
        self.pending_reminders.append(pending_count)
        return True

    def messages_to(self, user_id: str) -> list[str]:
        return [text for uid, text in self.direct_messages if uid == user_id]


class FakeGeneration:
    """Scripted generation results. Calls are recorded for assertions."""

    def __init__(self):
        self.calls: list[tuple[str, dict]] = []
        self.fail: set[str] = set()
        self.replies: dict[str, str] = {
            "polish": "📋 *SUBMISSION SUMMARY*",
            "converse": "Have you tried ChatGPT?",
            "help_converse": "Try ClickUp AI for that.",
            "weekly_tip": "💡 *Opie's AI Tip of the Week*",
        }

    def _result(self, name: str) -> Result[str]:
        if name in self.fail:
            return Result.failure("boom", code="llm_error")
        return Result.success(self.replies[name])

    async def polish(self, answers, edit_request=None):
        self.calls.append(("polish", {"answers": dict(answers), "edit_request": edit_request}))
        return self._result("polish")

    async def converse(self, history):
        self.calls.append(("converse", {"history": list(history)}))
        return self._result("converse")

    async def help_converse(self, history, challenge, department=None):
        self.calls.append(("help_converse", {"history": list(history), "challenge": challenge, "department": department}))
        return self._result("help_converse")

    async def weekly_tip(self):
        self.calls.append(("weekly_tip", {}))
        return self._result("weekly_tip")

    def calls_named(self, name: str) -> list[dict]:
        return [kwargs for call, kwargs in self.calls if call == name]


class FakeSheets:
    """In-memory stand-in for the spreadsheet."""

    def __init__(self):
        self.submissions: list[SubmissionRecord] = []
        self.help_requests: list[HelpRequestRecord] = []
        self.workflows: dict[str, list[str]] = {}
        self.append_ok = True
        self.update_ok = True
        self.status_updates: list[tuple[int, str]] = []

    async def append_submission(self, submission: NewSubmission) -> bool:
        if not self.append_ok:
            return False
        self.submissions.append(
            SubmissionRecord(
                row_number=len(self.submissions) + 2,
                user_name=submission.user_name,
                problem=submission.problem,
                solution=submission.solution,
                time_saved=submission.time_saved,
                reusable_by=submission.reusable_by,
                how_to_reuse=submission.how_to_reuse,
                polished_summary=submission.polished_summary,
                status=SubmissionStatus.PENDING.value,
                user_id=submission.user_id,
            )
        )
        return True

    async def append_help_request(self, request: HelpRequestRecord) -> bool:
        self.help_requests.append(request)
        return True

    async def get_approved_submissions(self):
        return [s for s in self.submissions if s.is_approved]

    async def get_pending_submissions(self):
        return [s for s in self.submissions if s.is_pending]

    async def get_submission_by_row(self, row_number: int):
        return next((s for s in self.submissions if s.row_number == row_number), None)

    async def update_submission_status(self, row_number: int, status) -> bool:
        if not self.update_ok:
            return False
        self.status_updates.append((row_number, SubmissionStatus(status).value))
        for index, submission in enumerate(self.submissions):
            if submission.row_number == row_number:
                self.submissions[index] = submission.model_copy(update={"status": SubmissionStatus(status).value})
        return True

    async def get_innovators(self):
        innovators: dict = {}
        for s in await self.get_approved_submissions():
            innovators.setdefault(s.user_name or "Unknown", []).append(s)
        return innovators

    async def get_workflows(self):
        return dict(self.workflows)

    async def seed_workflows(self, workflows) -> int:
        count = 0
        for team, items in workflows.items():
            self.workflows.setdefault(team, []).extend(items)
            count += len(items)
        return count


@pytest.fixture
def company():
    return CompanyContext(
        name="Opiniion",
        industry="Property Management Software",
        teams=["Sales", "Engineering", "Customer Success", "Finance", "Marketing"],
        department_aliases={"cs": "Customer Success", "dev": "Engineering", "accounting": "Finance"},
        approved_tools=[
            Tool(name="ChatGPT", category="AI Assistant", has_ai=True, use_cases=["Writing emails"], teams=["All teams"]),
            Tool(name="Gong", category="Sales", has_ai=True, use_cases=["Call analysis"], teams=["Sales"]),
            Tool(name="Google Workspace", category="Productivity", has_ai=False, teams=["All teams"]),
        ],
        workflows={"Sales": ["Draft follow-up emails", "Summarize calls"], "Finance": ["Reconcile invoices"]},
        tips=["💡 *Tip:* Ask AI for three versions."],
    )


@pytest.fixture
def real_company():
    return load_company_context(Settings().company_context_path)


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def sessions(backend):
    return SessionStore(backend)


@pytest.fixture
def fake_slack():
    return FakeSlack()


@pytest.fixture
def fake_generation():
    return FakeGeneration()


@pytest.fixture
def fake_sheets():
    return FakeSheets()


@pytest.fixture
def flow_context(fake_generation, fake_sheets, fake_slack, company):
    return FlowContext(
        user_id="U123",
        generation=fake_generation,
        sheets=fake_sheets,
        slack=fake_slack,
        company=company,
    )


@pytest.fixture
def conversation_router(sessions, fake_slack, fake_generation, fake_sheets, company):
    return ConversationRouter(sessions, fake_slack, fake_generation, fake_sheets, company, AccessPolicy())


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        slack_signing_secret=SIGNING_SECRET,
        admin_user_id=ADMIN_ID,
        cron_secret="cron-secret",
        slack_channel_id="CANNOUNCE",
    )


@pytest.fixture
def container(test_settings, backend, company, fake_slack, fake_sheets, fake_generation):
    return assemble_container(test_settings, backend, company, fake_slack, fake_sheets, fake_generation)
