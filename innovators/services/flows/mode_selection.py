from typing import Optional

from innovators.schemas.session import ChatSession, HelpSession, HelpStep, Session, SubmitSession
from innovators.services.department_service import example_teams
from innovators.services.flows import messages
from innovators.services.flows.base import FlowContext, Transition, is_word


async def select_mode(session: Optional[Session], text: str, ctx: FlowContext) -> Transition:
    """First message without a session: pick a mode, or treat the text as a help challenge."""
    user_id = ctx.user_id
    if is_word(text, "submit", "1"):
        return Transition(session=SubmitSession(user_id=user_id), replies=[messages.SUBMIT_OPENING])
    if is_word(text, "help", "2"):
        return Transition(
            session=HelpSession(user_id=user_id),
            replies=[messages.help_department_prompt(example_teams(ctx.company.teams))],
        )
    if is_word(text, "chat", "3"):
        return Transition(session=ChatSession(user_id=user_id), replies=[messages.CHAT_OPENING])

    return Transition(session=HelpSession(user_id=user_id, step=HelpStep.CHALLENGE), handoff=text)
