from typing import Optional

from innovators.logging_config import LoggerAdapter, get_logger
from innovators.schemas.session import Session
from innovators.services.company_context import CompanyContext
from innovators.services.flows import FlowContext, Transition, handler_for
from innovators.services.flows import messages
from innovators.services.generation_service import GenerationService
from innovators.services.session_store import SessionStore
from innovators.services.sheets_service import SheetsService
from innovators.services.slack_service import SlackService

logger = get_logger("conversation_service")

MAX_SETTLE_ITERATIONS = 4


class AccessPolicy:
    """Who may use the conversational flows while the bot is in private testing."""

    def __init__(self, private_mode: bool = False, allowed_user_ids: Optional[set[str]] = None):
        self.private_mode = private_mode
        self.allowed_user_ids = set(allowed_user_ids or ())

    def is_allowed(self, user_id: str) -> bool:
        if not self.private_mode:
            return True
        return user_id in self.allowed_user_ids


class ConversationRouter:
    """Routes a direct message to the handler for the user's current session.

    Each handler returns a Transition. The router persists it, sends the
    replies in order and, while the handler hands text off, runs the new
    session's handler on it until the conversation settles.
    """

    def __init__(
        self,
        sessions: SessionStore,
        slack: SlackService,
        generation: GenerationService,
        sheets: SheetsService,
        company: CompanyContext,
        access: Optional[AccessPolicy] = None,
    ):
        self.sessions = sessions
        self.slack = slack
        self.generation = generation
        self.sheets = sheets
        self.company = company
        self.access = access or AccessPolicy()

    def context_for(self, user_id: str) -> FlowContext:
        return FlowContext(
            user_id=user_id,
            generation=self.generation,
            sheets=self.sheets,
            slack=self.slack,
            company=self.company,
        )

    async def handle_message(self, user_id: str, text: str) -> None:
        log = LoggerAdapter(logger, {"user_id": user_id})
        if not self.access.is_allowed(user_id):
            log.info("Message from user outside private allowlist")
            await self.slack.send_direct_message(user_id, messages.TESTING_MODE)
            return

        ctx = self.context_for(user_id)
        session = await self.sessions.get(user_id)
        pending = (text or "").strip()

        for _ in range(MAX_SETTLE_ITERATIONS):
            handler = handler_for(session)
            result = await handler(session, pending, ctx)
            await self._apply(user_id, session, result)
            log.debug(
                "Transition applied",
                context={
                    "mode": result.session.mode if result.session else None,
                    "step": result.session.step.value if result.session else None,
                },
            )
            if result.handoff is None:
                return
            session, pending = result.session, result.handoff

        log.error("Conversation did not settle", context={"iterations": MAX_SETTLE_ITERATIONS})

    async def _apply(self, user_id: str, previous: Optional[Session], result: Transition) -> None:
        current = result.session
        if current is None:
            if previous is not None:
                await self.sessions.delete(user_id)
        elif previous is None or previous.mode != current.mode:
            await self.sessions.replace(current)
        else:
            await self.sessions.save(current)

        for reply in result.replies:
            await self.slack.send_direct_message(user_id, reply)
