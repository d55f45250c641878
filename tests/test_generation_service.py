import asyncio
from unittest.mock import AsyncMock, Mock

from innovators.schemas.session import HistoryTurn
from innovators.schemas.sheets import SubmissionRecord
from innovators.services.generation_service import GenerationService
from innovators.services.llm import LLMError, LLMResponse


def _provider(content="Polished", side_effect=None):
    provider = Mock()
    provider.generate = AsyncMock(return_value=LLMResponse(content=content, model="m"), side_effect=side_effect)
    return provider


class TestGenerationService:
    def test_polish_includes_answers_and_edit(self, company):
        provider = _provider()
        service = GenerationService(provider, company)

        result = asyncio.run(service.polish({"problem": "Manual reports", "solution": "ChatGPT"}, edit_request="shorter"))

        assert result.ok is True
        assert result.value == "Polished"
        prompt = provider.generate.call_args[0][0][0]["content"]
        assert "Manual reports" in prompt
        assert "shorter" in prompt
        assert provider.generate.call_args[1]["model"] == "gpt-4o-mini"

    def test_failure_becomes_result(self, company):
        service = GenerationService(_provider(side_effect=LLMError("down")), company)

        result = asyncio.run(service.converse([HistoryTurn(role="user", content="hi")]))

        assert result.ok is False
        assert result.error_code == "llm_error"

    def test_converse_sends_system_prompt_then_history(self, company):
        provider = _provider()
        service = GenerationService(provider, company, chat_model="gpt-4o")

        asyncio.run(service.converse([HistoryTurn(role="user", content="hi")]))

        sent = provider.generate.call_args[0][0]
        assert sent[0]["role"] == "system"
        assert "Opiniion" in sent[0]["content"]
        assert sent[1:] == [{"role": "user", "content": "hi"}]
        assert provider.generate.call_args[1]["model"] == "gpt-4o"

    def test_help_converse_uses_sheet_context(self, company):
        provider = _provider()
        sheets = Mock()
        sheets.get_workflows = AsyncMock(return_value={"Sales": ["Score leads with AI"]})
        sheets.get_approved_submissions = AsyncMock(
            return_value=[SubmissionRecord(row_number=2, problem="Weekly KPI deck", solution="ChatGPT")]
        )
        service = GenerationService(provider, company, sheets=sheets)

        asyncio.run(service.help_converse([HistoryTurn(role="user", content="help")], "help", "Sales"))

        system_prompt = provider.generate.call_args[0][0][0]["content"]
        assert "Score leads with AI" in system_prompt
        assert "Weekly KPI deck" in system_prompt
        assert "*Sales* team" in system_prompt

    def test_help_converse_without_sheets_uses_config(self, company):
        provider = _provider()
        service = GenerationService(provider, company)

        asyncio.run(service.help_converse([HistoryTurn(role="user", content="x")], "x"))

        assert "Reconcile invoices" in provider.generate.call_args[0][0][0]["content"]

    def test_weekly_tip(self, company):
        provider = _provider(content="💡 tip")
        assert asyncio.run(GenerationService(provider, company).weekly_tip()).value == "💡 tip"
