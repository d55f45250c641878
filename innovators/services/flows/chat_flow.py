from innovators.schemas.session import ChatSession, ChatStep, HistoryTurn, SubmitSession
from innovators.services.flows import messages
from innovators.services.flows.base import FlowContext, Transition, is_word
from innovators.services.state_machine import advance


async def handle_chat(session: ChatSession, text: str, ctx: FlowContext) -> Transition:
    if is_word(text, "submit"):
        return Transition(session=SubmitSession(user_id=session.user_id), replies=[messages.SUBMIT_SWITCH])
    if is_word(text, "reset", "cancel"):
        return Transition(session=None, replies=[messages.CHAT_CLEARED])

    history = [*session.conversation_history, HistoryTurn(role="user", content=text)]
    result = await ctx.generation.converse(history)
    if not result.ok:
        # History stays as it was; the user can just resend.
        return Transition(session=session, replies=[messages.RETRY_LATER])

    history.append(HistoryTurn(role="assistant", content=result.value))
    updated = advance(session, ChatStep.CONVERSATION, conversation_history=history)
    return Transition(session=updated, replies=[result.value])
