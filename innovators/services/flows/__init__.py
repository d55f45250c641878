from typing import Optional

from innovators.schemas.session import Mode, Session
from innovators.services.flows.base import FlowContext, FlowHandler, Transition
from innovators.services.flows.chat_flow import handle_chat
from innovators.services.flows.help_flow import handle_help
from innovators.services.flows.mode_selection import select_mode
from innovators.services.flows.submit_flow import handle_submit

HANDLERS: dict[Mode, FlowHandler] = {
    Mode.SUBMIT: handle_submit,
    Mode.HELP: handle_help,
    Mode.CHAT: handle_chat,
}


def handler_for(session: Optional[Session]) -> FlowHandler:
    if session is None:
        return select_mode
    return HANDLERS[Mode(session.mode)]


__all__ = ["FlowContext", "FlowHandler", "HANDLERS", "Transition", "handler_for"]
