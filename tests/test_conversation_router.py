import asyncio

from innovators.schemas.session import ChatSession, HelpSession, HelpStep, SubmitSession, SubmitStep
from innovators.services.conversation_service import AccessPolicy, ConversationRouter
from innovators.services.flows import messages

USER = "U123"


def _send(router, text, user_id=USER):
    asyncio.run(router.handle_message(user_id, text))


class TestModeSelection:
    def test_keywords_and_numerals(self, conversation_router, sessions):
        for text, expected in (("submit", SubmitSession), ("2", HelpSession), ("Chat", ChatSession)):
            asyncio.run(sessions.delete(USER))
            _send(conversation_router, text)
            assert isinstance(asyncio.run(sessions.get(USER)), expected)

    def test_help_keyword_asks_for_department(self, conversation_router, sessions, fake_slack):
        _send(conversation_router, "help")

        assert asyncio.run(sessions.get(USER)).step == HelpStep.DEPARTMENT
        assert "what team are you on" in fake_slack.messages_to(USER)[-1]

    def test_free_text_becomes_help_challenge(self, conversation_router, sessions, fake_generation, fake_sheets):
        _send(conversation_router, "I spend hours formatting board decks")

        session = asyncio.run(sessions.get(USER))
        assert isinstance(session, HelpSession)
        assert session.step == HelpStep.CONVERSATION
        assert session.department is None
        assert session.challenge == "I spend hours formatting board decks"
        assert fake_generation.calls_named("help_converse")[0]["challenge"] == "I spend hours formatting board decks"
        assert fake_sheets.help_requests[0].challenge == "I spend hours formatting board decks"

    def test_question_at_department_step_settles_in_one_message(self, conversation_router, sessions, fake_slack):
        _send(conversation_router, "help")
        _send(conversation_router, "Can AI draft my renewal emails?")

        session = asyncio.run(sessions.get(USER))
        assert session.step == HelpStep.CONVERSATION
        assert session.challenge == "Can AI draft my renewal emails?"
        assert fake_slack.messages_to(USER)[-1] == "Try ClickUp AI for that."


class TestModeSwitch:
    def test_chat_submit_replaces_session(self, conversation_router, sessions):
        _send(conversation_router, "chat")
        _send(conversation_router, "brainstorm please")
        _send(conversation_router, "submit")

        session = asyncio.run(sessions.get(USER))
        assert isinstance(session, SubmitSession)
        assert session.step == SubmitStep.PROBLEM

    def test_cancel_deletes(self, conversation_router, sessions):
        _send(conversation_router, "submit")
        _send(conversation_router, "cancel")
        assert asyncio.run(sessions.get(USER)) is None


class TestAccessControl:
    def test_private_mode_blocks_unknown_users(self, sessions, fake_slack, fake_generation, fake_sheets, company):
        router = ConversationRouter(
            sessions, fake_slack, fake_generation, fake_sheets, company, AccessPolicy(True, {"UALLOWED"})
        )

        _send(router, "submit", user_id="USTRANGER")
        _send(router, "submit", user_id="UALLOWED")

        assert fake_slack.messages_to("USTRANGER") == [messages.TESTING_MODE]
        assert asyncio.run(sessions.get("USTRANGER")) is None
        assert isinstance(asyncio.run(sessions.get("UALLOWED")), SubmitSession)


class TestEndToEndSubmission:
    def test_five_answers_then_confirm(self, conversation_router, sessions, fake_slack, fake_sheets):
        _send(conversation_router, "submit")
        assert messages.QUESTIONS[SubmitStep.PROBLEM] in fake_slack.messages_to(USER)[0]

        answers = [
            "Too many manual reports",
            "ChatGPT",
            "2 hours/week",
            "Finance team",
            "Use the same prompt template",
        ]
        for answer in answers:
            _send(conversation_router, answer)

        session = asyncio.run(sessions.get(USER))
        assert session.step == SubmitStep.REVIEW
        last_messages = fake_slack.messages_to(USER)[-2:]
        assert last_messages[0] == messages.SUBMIT_POLISHING
        assert "📋 *SUBMISSION SUMMARY*" in last_messages[1]
        assert messages.SUBMIT_REVIEW_PROMPT in last_messages[1]

        _send(conversation_router, "submit")

        assert asyncio.run(sessions.get(USER)) is None
        [record] = fake_sheets.submissions
        assert [record.problem, record.solution, record.time_saved, record.reusable_by, record.how_to_reuse] == answers
        assert record.status == "pending"
        assert record.user_id == USER
        assert fake_slack.messages_to(USER)[-1] == messages.SUBMIT_CONFIRMED
