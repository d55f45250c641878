import pytest
from pydantic import ValidationError

from innovators.schemas.session import (
    ChatSession,
    ChatStep,
    HelpSession,
    HelpStep,
    Mode,
    SubmitSession,
    SubmitStep,
    load_session,
)
from innovators.services.state_machine import (
    VALID_TRANSITIONS,
    InvalidTransitionError,
    advance,
    can_transition,
    is_valid_step,
    next_submit_step,
    transition,
)


class TestStepSets:
    def test_submit_steps(self):
        assert [s.value for s in SubmitStep] == [
            "problem",
            "solution",
            "time_saved",
            "reusable_by",
            "how_to_reuse",
            "review",
        ]

    def test_help_steps(self):
        assert [s.value for s in HelpStep] == ["department", "challenge", "conversation"]

    def test_chat_steps(self):
        assert [s.value for s in ChatStep] == ["conversation"]

    def test_step_membership_is_per_mode(self):
        assert is_valid_step(Mode.SUBMIT, "review")
        assert not is_valid_step(Mode.CHAT, "review")
        assert is_valid_step(Mode.HELP, "conversation")
        assert is_valid_step(Mode.CHAT, "conversation")
        assert not is_valid_step(Mode.CHAT, "department")


class TestValidTransitions:
    def test_submit_is_linear(self):
        assert can_transition(Mode.SUBMIT, SubmitStep.PROBLEM, SubmitStep.SOLUTION)
        assert not can_transition(Mode.SUBMIT, SubmitStep.PROBLEM, SubmitStep.TIME_SAVED)
        assert can_transition(Mode.SUBMIT, SubmitStep.HOW_TO_REUSE, SubmitStep.REVIEW)

    def test_review_loops_on_itself(self):
        assert can_transition(Mode.SUBMIT, SubmitStep.REVIEW, SubmitStep.REVIEW)
        assert not can_transition(Mode.SUBMIT, SubmitStep.REVIEW, SubmitStep.PROBLEM)

    def test_cross_mode_step_rejected(self):
        assert not can_transition(Mode.CHAT, ChatStep.CONVERSATION, HelpStep.CHALLENGE)

    def test_help_cannot_go_back(self):
        assert not can_transition(Mode.HELP, HelpStep.CONVERSATION, HelpStep.DEPARTMENT)

    def test_every_target_is_in_mode_step_set(self):
        for (mode, _), targets in VALID_TRANSITIONS.items():
            for target in targets:
                assert is_valid_step(mode, target)

    def test_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc:
            transition(Mode.SUBMIT, SubmitStep.PROBLEM, SubmitStep.REVIEW)
        assert "problem -> review" in str(exc.value)


class TestNextSubmitStep:
    def test_order(self):
        assert next_submit_step(SubmitStep.PROBLEM) == SubmitStep.SOLUTION
        assert next_submit_step(SubmitStep.REUSABLE_BY) == SubmitStep.HOW_TO_REUSE
        assert next_submit_step(SubmitStep.HOW_TO_REUSE) == SubmitStep.REVIEW


class TestAdvance:
    def test_applies_fields_and_step(self):
        session = SubmitSession(user_id="U1")
        moved = advance(session, SubmitStep.SOLUTION, problem="p")
        assert moved.step == SubmitStep.SOLUTION
        assert moved.problem == "p"
        assert session.step == SubmitStep.PROBLEM

    def test_rejects_skip(self):
        with pytest.raises(InvalidTransitionError):
            advance(HelpSession(user_id="U1"), HelpStep.CONVERSATION)

    def test_chat_stays_in_conversation(self):
        assert advance(ChatSession(user_id="U1"), ChatStep.CONVERSATION).step == ChatStep.CONVERSATION


class TestSessionSchema:
    def test_discriminated_by_mode(self):
        session = load_session('{"mode": "help", "user_id": "U1", "step": "challenge"}')
        assert isinstance(session, HelpSession)
        assert session.step == HelpStep.CHALLENGE

    def test_out_of_set_step_rejected(self):
        with pytest.raises(ValidationError):
            load_session('{"mode": "chat", "user_id": "U1", "step": "review"}')
