from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from innovators.schemas.session import Session
from innovators.services.company_context import CompanyContext
from innovators.services.generation_service import GenerationService
from innovators.services.sheets_service import SheetsService
from innovators.services.slack_service import SlackService


@dataclass
class Transition:
    """Outcome of one handler step.

    session None means the user's session is deleted. A handoff asks the
    router to feed that text straight into the handler of the new session.
    """

    session: Optional[Session]
    replies: list[str] = field(default_factory=list)
    handoff: Optional[str] = None


@dataclass
class FlowContext:
    user_id: str
    generation: GenerationService
    sheets: SheetsService
    slack: SlackService
    company: CompanyContext

    async def notify(self, text: str) -> None:
        """Send a progress message right away, ahead of a slow call."""
        await self.slack.send_direct_message(self.user_id, text)


FlowHandler = Callable[[Optional[Session], str, FlowContext], Awaitable[Transition]]


def is_word(text: str, *words: str) -> bool:
    return text.strip().lower() in words
