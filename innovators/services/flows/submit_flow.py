from innovators.logging_config import get_logger
from innovators.schemas.session import SubmitSession, SubmitStep
from innovators.schemas.sheets import NewSubmission
from innovators.services.flows import messages
from innovators.services.flows.base import FlowContext, Transition, is_word
from innovators.services.state_machine import advance, next_submit_step

logger = get_logger("flows.submit")

CANCEL_WORDS = ("cancel",)
AFFIRMATIVE_WORDS = (
    "submit",
    "yes",
    "y",
    "confirm",
    "looks good",
    "lgtm",
    "approve",
    "done",
    "ok",
    "send",
    "send it",
)


def is_affirmative(text: str) -> bool:
    return is_word(text.rstrip("!. "), *AFFIRMATIVE_WORDS)


async def handle_submit(session: SubmitSession, text: str, ctx: FlowContext) -> Transition:
    if is_word(text, *CANCEL_WORDS):
        logger.info("Submission cancelled", extra={"context": {"user_id": ctx.user_id, "step": session.step.value}})
        return Transition(session=None, replies=[messages.SUBMIT_CANCELLED])

    if session.step == SubmitStep.REVIEW:
        return await _handle_review(session, text, ctx)
    return await _handle_answer(session, text, ctx)


async def _handle_answer(session: SubmitSession, text: str, ctx: FlowContext) -> Transition:
    current = session.step
    next_step = next_submit_step(current)
    answered = session.model_copy(update={current.value: text})

    if next_step != SubmitStep.REVIEW:
        updated = advance(answered, next_step)
        return Transition(session=updated, replies=[f"Got it! ✅\n\n{messages.QUESTIONS[next_step]}"])

    await ctx.notify(messages.SUBMIT_POLISHING)
    result = await ctx.generation.polish(answered.answers())
    if not result.ok:
        # Discard partial answers rather than strand the user mid-flow.
        logger.warning("Polish failed, dropping submission", extra={"context": {"user_id": ctx.user_id}})
        return Transition(session=None, replies=[messages.SUBMIT_POLISH_FAILED])

    updated = advance(answered, SubmitStep.REVIEW, polished_summary=result.value)
    return Transition(session=updated, replies=[messages.submit_review_message(result.value)])


async def _handle_review(session: SubmitSession, text: str, ctx: FlowContext) -> Transition:
    if is_affirmative(text):
        return await _confirm(session, ctx)

    result = await ctx.generation.polish(session.answers(), edit_request=text)
    if not result.ok:
        return Transition(session=session, replies=[messages.SUBMIT_EDIT_FAILED])

    updated = advance(session, SubmitStep.REVIEW, polished_summary=result.value)
    return Transition(session=updated, replies=[messages.submit_review_message(result.value)])


async def _confirm(session: SubmitSession, ctx: FlowContext) -> Transition:
    user_name = await ctx.slack.get_user_display_name(ctx.user_id)
    summary = session.polished_summary or ""
    record = NewSubmission(
        user_id=ctx.user_id,
        user_name=user_name or "",
        polished_summary=summary,
        **session.answers(),
    )
    if not await ctx.sheets.append_submission(record):
        return Transition(session=session, replies=[messages.SUBMIT_SAVE_FAILED])

    await ctx.slack.notify_admin(ctx.user_id, summary)
    logger.info("Submission confirmed", extra={"context": {"user_id": ctx.user_id}})
    return Transition(session=None, replies=[messages.SUBMIT_CONFIRMED])
