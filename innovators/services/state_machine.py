from enum import Enum
from typing import Any

from innovators.schemas.session import ChatStep, HelpStep, Mode, Session, SubmitStep

STEP_SETS: dict[Mode, type[Enum]] = {
    Mode.SUBMIT: SubmitStep,
    Mode.HELP: HelpStep,
    Mode.CHAT: ChatStep,
}

SUBMIT_QUESTION_ORDER = [
    SubmitStep.PROBLEM,
    SubmitStep.SOLUTION,
    SubmitStep.TIME_SAVED,
    SubmitStep.REUSABLE_BY,
    SubmitStep.HOW_TO_REUSE,
]

# Keyed by (mode, step): HelpStep.CONVERSATION and ChatStep.CONVERSATION compare equal as strings.
VALID_TRANSITIONS: dict[tuple[Mode, str], list[str]] = {
    (Mode.SUBMIT, SubmitStep.PROBLEM): [SubmitStep.SOLUTION],
    (Mode.SUBMIT, SubmitStep.SOLUTION): [SubmitStep.TIME_SAVED],
    (Mode.SUBMIT, SubmitStep.TIME_SAVED): [SubmitStep.REUSABLE_BY],
    (Mode.SUBMIT, SubmitStep.REUSABLE_BY): [SubmitStep.HOW_TO_REUSE],
    (Mode.SUBMIT, SubmitStep.HOW_TO_REUSE): [SubmitStep.REVIEW],
    (Mode.SUBMIT, SubmitStep.REVIEW): [SubmitStep.REVIEW],
    (Mode.HELP, HelpStep.DEPARTMENT): [HelpStep.CHALLENGE],
    (Mode.HELP, HelpStep.CHALLENGE): [HelpStep.CONVERSATION],
    (Mode.HELP, HelpStep.CONVERSATION): [HelpStep.CONVERSATION],
    (Mode.CHAT, ChatStep.CONVERSATION): [ChatStep.CONVERSATION],
}


class InvalidTransitionError(Exception):
    def __init__(self, mode: Mode, from_step: str, to_step: str):
        self.mode = mode
        self.from_step = from_step
        self.to_step = to_step
        super().__init__(f"Invalid {Mode(mode).value} transition: {_value(from_step)} -> {_value(to_step)}")


def _value(step: Any) -> str:
    return step.value if isinstance(step, Enum) else str(step)


_ALLOWED_BY_VALUE: dict[tuple[Mode, str], set[str]] = {
    (mode, _value(step)): {_value(target) for target in targets} for (mode, step), targets in VALID_TRANSITIONS.items()
}


def _allowed(mode: Mode, from_step: Any) -> set[str]:
    return _ALLOWED_BY_VALUE.get((mode, _value(from_step)), set())


def is_valid_step(mode: Mode, step: Any) -> bool:
    """Check that step belongs to the step set of mode."""
    step_set = STEP_SETS[Mode(mode)]
    return _value(step) in {member.value for member in step_set}


def can_transition(mode: Mode, from_step: Any, to_step: Any) -> bool:
    """Check if transition is valid."""
    mode = Mode(mode)
    if not is_valid_step(mode, from_step) or not is_valid_step(mode, to_step):
        return False
    return _value(to_step) in _allowed(mode, from_step)


def transition(mode: Mode, from_step: Any, to_step: Any) -> Any:
    """Perform step transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(mode, from_step, to_step):
        raise InvalidTransitionError(mode, from_step, to_step)
    return STEP_SETS[Mode(mode)](_value(to_step))


def next_submit_step(current: SubmitStep) -> SubmitStep:
    """Next question after current, or REVIEW once the questions run out."""
    index = SUBMIT_QUESTION_ORDER.index(SubmitStep(current))
    if index + 1 < len(SUBMIT_QUESTION_ORDER):
        return SUBMIT_QUESTION_ORDER[index + 1]
    return SubmitStep.REVIEW


def advance(session: Session, to_step: Any, **fields: Any) -> Session:
    """Return a copy of session moved to to_step with fields applied."""
    step = transition(Mode(session.mode), session.step, to_step)
    return session.model_copy(update={**fields, "step": step})
