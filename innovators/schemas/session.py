from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class Mode(str, Enum):
    SUBMIT = "submit"
    HELP = "help"
    CHAT = "chat"


class SubmitStep(str, Enum):
    PROBLEM = "problem"
    SOLUTION = "solution"
    TIME_SAVED = "time_saved"
    REUSABLE_BY = "reusable_by"
    HOW_TO_REUSE = "how_to_reuse"
    REVIEW = "review"


class HelpStep(str, Enum):
    DEPARTMENT = "department"
    CHALLENGE = "challenge"
    CONVERSATION = "conversation"


class ChatStep(str, Enum):
    CONVERSATION = "conversation"


class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class SubmitSession(BaseModel):
    mode: Literal["submit"] = "submit"
    user_id: str
    step: SubmitStep = SubmitStep.PROBLEM
    problem: Optional[str] = None
    solution: Optional[str] = None
    time_saved: Optional[str] = None
    reusable_by: Optional[str] = None
    how_to_reuse: Optional[str] = None
    polished_summary: Optional[str] = None

    def answers(self) -> dict[str, str]:
        return {
            "problem": self.problem or "",
            "solution": self.solution or "",
            "time_saved": self.time_saved or "",
            "reusable_by": self.reusable_by or "",
            "how_to_reuse": self.how_to_reuse or "",
        }


class HelpSession(BaseModel):
    mode: Literal["help"] = "help"
    user_id: str
    step: HelpStep = HelpStep.DEPARTMENT
    department: Optional[str] = None
    challenge: Optional[str] = None
    conversation_history: list[HistoryTurn] = Field(default_factory=list)


class ChatSession(BaseModel):
    mode: Literal["chat"] = "chat"
    user_id: str
    step: ChatStep = ChatStep.CONVERSATION
    conversation_history: list[HistoryTurn] = Field(default_factory=list)


Session = Annotated[Union[SubmitSession, HelpSession, ChatSession], Field(discriminator="mode")]

SESSION_ADAPTER: TypeAdapter = TypeAdapter(Session)


def load_session(raw: str) -> Session:
    return SESSION_ADAPTER.validate_json(raw)


def dump_session(session: Session) -> str:
    return session.model_dump_json()
