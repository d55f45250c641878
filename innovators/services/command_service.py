import random
import re
from typing import Awaitable, Callable, Optional

from innovators.logging_config import get_logger
from innovators.schemas.sheets import SubmissionRecord, SubmissionStatus
from innovators.services.company_context import CompanyContext, Tool
from innovators.services.conversation_service import AccessPolicy
from innovators.services.department_service import example_teams
from innovators.services.flows import messages
from innovators.services.session_store import SessionStore
from innovators.services.sheets_service import SheetsService
from innovators.services.slack_service import SlackService

logger = get_logger("command_service")

# Slow lookups: acknowledged first, then run after the response is sent.
DEFERRED_COMMANDS = {"/tip", "/innovators-circle", "/pending", "/approve", "/decline", "/seed"}
ADMIN_COMMANDS = {"/pending", "/approve", "/decline", "/seed"}

TOOL_GROUPS = [
    ("Writing & Content", re.compile(r"writing|content|document", re.I), None),
    ("Sales & Calls", re.compile(r"sales|call|crm", re.I), re.compile(r"sales", re.I)),
    ("Code & Engineering", re.compile(r"code|dev|test|review", re.I), re.compile(r"engineering", re.I)),
]

PROBLEM_PREVIEW_CHARS = 100
SOLUTION_PREVIEW_CHARS = 80


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def parse_row_argument(text: Optional[str]) -> Optional[int]:
    """Positive integer row reference, or None if the argument is missing or malformed."""
    value = (text or "").strip()
    if not value.isdigit():
        return None
    row = int(value)
    return row if row > 0 else None


def _tool_matches(tool: Tool, search: str) -> bool:
    needle = search.lower()
    haystacks = [tool.name, tool.category, *tool.use_cases, *tool.ai_features]
    return any(needle in item.lower() for item in haystacks)


def format_tools_list(tools: list[Tool], search: Optional[str] = None) -> str:
    ai_tools = [tool for tool in tools if tool.has_ai]
    if search:
        ai_tools = [tool for tool in ai_tools if _tool_matches(tool, search)]

    if not ai_tools:
        if search:
            return f'No AI tools found matching "{search}". Try `/tools` to see all.'
        return "No AI tools configured yet."

    if search:
        lines = []
        for tool in ai_tools:
            features = f"\n   _{', '.join(tool.ai_features[:2])}_" if tool.ai_features else ""
            lines.append(f"• *{tool.name}* ({tool.category}){features}")
        return f'🔧 *AI Tools matching "{search}":*\n\n' + "\n".join(lines)

    sections = []
    for label, use_pattern, team_pattern in TOOL_GROUPS:
        names = [
            tool.name
            for tool in ai_tools
            if any(use_pattern.search(u) for u in [*tool.use_cases, *tool.ai_features])
            or (team_pattern and any(team_pattern.search(team) for team in tool.teams))
        ]
        if names:
            sections.append(f"*{label}:* {', '.join(dict.fromkeys(names))}")
    general = [t.name for t in ai_tools if t.category == "AI Assistant" or "All teams" in t.teams]
    if general:
        sections.append(f"*General AI:* {', '.join(dict.fromkeys(general))}")

    return (
        "🔧 *AI Tools You Can Use*\n\n"
        + "\n".join(sections)
        + "\n\n_Try `/tools sales` or `/tools writing` for details_"
    )


def format_workflows(workflows: dict[str, list[str]], team_search: Optional[str] = None) -> str:
    if not workflows:
        return "No workflows configured."

    if team_search:
        needle = team_search.lower()
        team = next((name for name in workflows if needle in name.lower()), None)
        if team is None:
            return f'Team "{team_search}" not found.\n\nAvailable teams: {", ".join(workflows)}'
        items = "\n".join(f"• {item}" for item in workflows[team])
        return f"📋 *{team} Workflows:*\n\n{items}"

    summary = "\n".join(f"• *{team}* ({len(items)} workflows)" for team, items in workflows.items())
    return (
        f"📋 *AI Workflows by Team:*\n\n{summary}\n\n"
        "_Use `/workflows [team]` to see details (e.g., `/workflows sales`)_"
    )


def format_hall_of_fame(innovators: dict) -> str:
    if not innovators:
        return "🏆 *The Innovators Circle*\n\n_No innovators yet! Be the first to submit a solution with `/submit`_"

    lines = []
    for name, solutions in innovators.items():
        count = len(solutions)
        plural = "s" if count > 1 else ""
        lines.append(f"🏆 *{name}* ({count} solution{plural})\n   _Latest:_ {solutions[-1].problem}")

    return (
        "🏆 *The Innovators Circle - Hall of Fame*\n\n"
        "These problem solvers have contributed AI solutions that help the whole team:\n\n"
        + "\n\n".join(lines)
        + "\n\n_Want to join them? Type `/submit` to share your AI win!_"
    )


def format_pending(pending: list[SubmissionRecord]) -> str:
    if not pending:
        return "✅ *No pending submissions!*\n\nAll caught up. New submissions will appear here."

    lines = [
        f"*{i}. {sub.user_name or 'Unknown'}* (Row {sub.row_number})\n"
        f"   _Problem:_ {_truncate(sub.problem, PROBLEM_PREVIEW_CHARS)}\n"
        f"   _Solution:_ {_truncate(sub.solution, SOLUTION_PREVIEW_CHARS)}\n"
        f"   `/approve {sub.row_number}` or `/decline {sub.row_number}`"
        for i, sub in enumerate(pending, start=1)
    ]
    return f"📋 *Pending Submissions ({len(pending)})*\n\n" + "\n\n".join(lines)


def approved_notice(submission: SubmissionRecord) -> str:
    return (
        "🎉 *Congratulations!* Your submission has been approved!\n\n"
        "You're now officially part of the *Innovators Circle* hall of fame! 🏆\n\n"
        f"Your solution:\n_{submission.problem}_\n\n"
        "We'll be in touch about your reward: a night out on us! 🍽️\n\n"
        "Keep those innovative ideas coming!"
    )


DECLINED_NOTICE = (
    "Thanks for your submission! 🙏\n\n"
    "After review, this particular solution wasn't quite the right fit for the Innovators Circle, "
    "but we really appreciate you thinking about ways to improve how we work!\n\n"
    "Keep experimenting with AI and submit again when you find another win. 💪"
)


class CommandDispatcher:
    """Handles slash commands. Every outcome is delivered as a direct message."""

    def __init__(
        self,
        sessions: SessionStore,
        slack: SlackService,
        sheets: SheetsService,
        company: CompanyContext,
        admin_user_id: str = "",
        access: Optional[AccessPolicy] = None,
        rng: Optional[random.Random] = None,
    ):
        self.sessions = sessions
        self.slack = slack
        self.sheets = sheets
        self.company = company
        self.admin_user_id = admin_user_id
        self.access = access or AccessPolicy()
        self.rng = rng or random.Random()
        self._handlers: dict[str, Callable[[str, str], Awaitable[None]]] = {
            "/innovators": self._welcome,
            "/commands": self._commands,
            "/tools": self._tools,
            "/workflows": self._workflows,
            "/tip": self._tip,
            "/innovators-circle": self._hall_of_fame,
            "/new": self._new,
            "/submit": self._submit,
            "/help": self._help,
            "/chat": self._chat,
            "/pending": self._pending,
            "/approve": self._approve,
            "/decline": self._decline,
            "/seed": self._seed,
        }

    @staticmethod
    def is_deferred(command: str) -> bool:
        return command in DEFERRED_COMMANDS

    def is_admin(self, user_id: str) -> bool:
        return bool(self.admin_user_id) and user_id == self.admin_user_id

    async def dispatch(self, command: str, text: str, user_id: str) -> None:
        handler = self._handlers.get(command)
        if handler is None:
            logger.info(f"Unknown command ignored: {command}", extra={"context": {"user_id": user_id}})
            return

        if command in ADMIN_COMMANDS and not self.is_admin(user_id):
            logger.warning(f"Non-admin invoked {command}", extra={"context": {"user_id": user_id}})
            await self._reply(user_id, messages.ADMIN_ONLY)
            return

        logger.info(f"Handling {command}", extra={"context": {"user_id": user_id}})
        await handler(user_id, (text or "").strip())

    async def _reply(self, user_id: str, text: str) -> None:
        await self.slack.send_direct_message(user_id, text)

    async def _welcome(self, user_id: str, text: str) -> None:
        await self._reply(user_id, messages.WELCOME_MESSAGE)

    async def _commands(self, user_id: str, text: str) -> None:
        await self._reply(user_id, messages.COMMANDS_HELP)

    async def _tools(self, user_id: str, text: str) -> None:
        await self._reply(user_id, format_tools_list(self.company.approved_tools, text or None))

    async def _workflows(self, user_id: str, text: str) -> None:
        workflows = await self.sheets.get_workflows() or self.company.workflows
        await self._reply(user_id, format_workflows(workflows, text or None))

    async def _tip(self, user_id: str, text: str) -> None:
        tips = list(self.company.tips)
        approved = await self.sheets.get_approved_submissions()
        if approved:
            win = self.rng.choice(approved)
            tips.append(f"🏆 *Recent win:* {win.problem}\n_Solution:_ {win.solution}\n_Time saved:_ {win.time_saved}")
        if not tips:
            await self._reply(user_id, "No tips yet. Check back soon!")
            return
        await self._reply(user_id, self.rng.choice(tips))

    async def _hall_of_fame(self, user_id: str, text: str) -> None:
        await self._reply(user_id, format_hall_of_fame(await self.sheets.get_innovators()))

    async def _new(self, user_id: str, text: str) -> None:
        await self.sessions.delete(user_id)
        await self._reply(user_id, messages.FRESH_START)

    async def _guard_access(self, user_id: str) -> bool:
        if self.access.is_allowed(user_id):
            return True
        await self._reply(user_id, messages.TESTING_MODE)
        return False

    async def _submit(self, user_id: str, text: str) -> None:
        if await self._guard_access(user_id):
            await self.sessions.create_submit(user_id)
            await self._reply(user_id, messages.SUBMIT_OPENING)

    async def _help(self, user_id: str, text: str) -> None:
        if await self._guard_access(user_id):
            await self.sessions.create_help(user_id)
            await self._reply(user_id, messages.help_department_prompt(example_teams(self.company.teams)))

    async def _chat(self, user_id: str, text: str) -> None:
        if await self._guard_access(user_id):
            await self.sessions.create_chat(user_id)
            await self._reply(user_id, messages.CHAT_OPENING)

    async def _pending(self, user_id: str, text: str) -> None:
        await self._reply(user_id, format_pending(await self.sheets.get_pending_submissions()))

    async def _approve(self, user_id: str, text: str) -> None:
        await self._review(user_id, text, SubmissionStatus.APPROVED)

    async def _decline(self, user_id: str, text: str) -> None:
        await self._review(user_id, text, SubmissionStatus.DECLINED)

    async def _review(self, user_id: str, text: str, status: SubmissionStatus) -> None:
        verb = "approve" if status == SubmissionStatus.APPROVED else "decline"
        row = parse_row_argument(text)
        if row is None:
            await self._reply(
                user_id, f"Usage: `/{verb} [row number]`\n\nUse `/pending` to see submissions awaiting review."
            )
            return

        submission = await self.sheets.get_submission_by_row(row)
        if submission is None:
            await self._reply(user_id, f"❌ No submission found at row {row}")
            return

        if not await self.sheets.update_submission_status(row, status):
            await self._reply(user_id, f"❌ Failed to {verb} submission. Please try again.")
            return

        name = submission.user_name or "Unknown"
        if status == SubmissionStatus.APPROVED:
            await self._reply(
                user_id,
                f"✅ Approved submission from *{name}*!\n\nThey've been notified and added to the Innovators Circle.",
            )
            notice = approved_notice(submission)
        else:
            await self._reply(user_id, f"✅ Declined submission from *{name}*.")
            notice = DECLINED_NOTICE

        if submission.user_id:
            await self._reply(submission.user_id, notice)

    async def _seed(self, user_id: str, text: str) -> None:
        count = await self.sheets.seed_workflows(self.company.workflows)
        if count == 0:
            await self._reply(user_id, "⚠️ No workflows were seeded. Check that Google Sheets is configured.")
            return
        await self._reply(user_id, f"🌱 Seeded {count} workflows into the Workflows sheet.")
