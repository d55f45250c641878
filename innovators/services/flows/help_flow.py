from innovators.logging_config import get_logger
from innovators.schemas.session import HelpSession, HelpStep, HistoryTurn, SubmitSession
from innovators.schemas.sheets import HelpRequestRecord
from innovators.services.department_service import (
    example_teams,
    is_skip_department,
    looks_like_question,
    resolve_department,
)
from innovators.services.flows import messages
from innovators.services.flows.base import FlowContext, Transition, is_word
from innovators.services.state_machine import advance

logger = get_logger("flows.help")


async def handle_help(session: HelpSession, text: str, ctx: FlowContext) -> Transition:
    if is_word(text, "cancel"):
        return Transition(session=None, replies=[messages.HELP_CANCELLED])
    if is_word(text, "submit"):
        return Transition(session=SubmitSession(user_id=session.user_id), replies=[messages.SUBMIT_SWITCH])

    if session.step == HelpStep.DEPARTMENT:
        return _handle_department(session, text, ctx)
    if session.step == HelpStep.CHALLENGE:
        return await _handle_challenge(session, text, ctx)
    return await _handle_conversation(session, text, ctx)


def _handle_department(session: HelpSession, text: str, ctx: FlowContext) -> Transition:
    company = ctx.company
    if is_skip_department(text):
        return Transition(session=advance(session, HelpStep.CHALLENGE), replies=[messages.HELP_CHALLENGE_PROMPT])

    department = resolve_department(text, company.teams, company.department_aliases)
    if department:
        logger.info("Department resolved", extra={"context": {"user_id": ctx.user_id, "department": department}})
        return Transition(
            session=advance(session, HelpStep.CHALLENGE, department=department),
            replies=[messages.help_challenge_prompt(department)],
        )

    if looks_like_question(text):
        # They skipped ahead and described the problem; treat it as the challenge.
        return Transition(session=advance(session, HelpStep.CHALLENGE), handoff=text)

    return Transition(session=session, replies=[messages.help_department_retry(example_teams(company.teams))])


async def _handle_challenge(session: HelpSession, text: str, ctx: FlowContext) -> Transition:
    challenge = text.strip()
    if not challenge:
        return Transition(session=session, replies=[messages.HELP_CHALLENGE_PROMPT])

    user_name = await ctx.slack.get_user_display_name(ctx.user_id)
    await ctx.sheets.append_help_request(
        HelpRequestRecord(
            user_id=ctx.user_id,
            user_name=user_name or "",
            department=session.department,
            challenge=challenge,
            note="Initial request - conversation started",
        )
    )
    await ctx.notify(messages.HELP_THINKING)

    history = [HistoryTurn(role="user", content=challenge)]
    result = await ctx.generation.help_converse(history, challenge, session.department)
    if not result.ok:
        return Transition(session=session, replies=[messages.RETRY_LATER])

    history.append(HistoryTurn(role="assistant", content=result.value))
    updated = advance(session, HelpStep.CONVERSATION, challenge=challenge, conversation_history=history)
    return Transition(session=updated, replies=[result.value])


async def _handle_conversation(session: HelpSession, text: str, ctx: FlowContext) -> Transition:
    history = [*session.conversation_history, HistoryTurn(role="user", content=text)]
    result = await ctx.generation.help_converse(history, session.challenge or "", session.department)
    if not result.ok:
        return Transition(session=session, replies=[messages.RETRY_LATER])

    history.append(HistoryTurn(role="assistant", content=result.value))
    updated = advance(session, HelpStep.CONVERSATION, conversation_history=history)
    return Transition(session=updated, replies=[result.value])
