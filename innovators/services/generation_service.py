import asyncio
from typing import Optional

from innovators.logging_config import get_logger
from innovators.schemas.session import HistoryTurn
from innovators.services.company_context import CompanyContext
from innovators.services.llm import LLMError, LLMProvider
from innovators.services.prompts import (
    build_chat_system_prompt,
    build_help_system_prompt,
    build_polish_prompt,
    build_weekly_tip_prompt,
)
from innovators.services.result import Result

logger = get_logger("generation_service")

POLISH_MAX_TOKENS = 500
CHAT_MAX_TOKENS = 1000
HELP_MAX_TOKENS = 1500
TIP_MAX_TOKENS = 400


def _history_messages(history: list[HistoryTurn]) -> list[dict]:
    return [{"role": turn.role, "content": turn.content} for turn in history]


class GenerationService:
    """Text generation for the conversation flows.

    Every call returns a Result; provider failures never propagate.
    """

    def __init__(
        self,
        provider: LLMProvider,
        company: CompanyContext,
        fast_model: str = "gpt-4o-mini",
        chat_model: str = "gpt-4o",
        sheets=None,
    ):
        self.provider = provider
        self.company = company
        self.fast_model = fast_model
        self.chat_model = chat_model
        self.sheets = sheets

    async def _generate(self, purpose: str, messages: list[dict], model: str, **kwargs) -> Result[str]:
        try:
            response = await self.provider.generate(messages, model=model, **kwargs)
        except LLMError as e:
            logger.error(f"Generation failed: {e}", extra={"context": {"purpose": purpose, "model": model}})
            return Result.failure(str(e))
        return Result.success(response.content)

    async def polish(self, answers: dict[str, str], edit_request: Optional[str] = None) -> Result[str]:
        """Turn raw submission answers into a reviewable summary."""
        messages = [{"role": "user", "content": build_polish_prompt(answers, edit_request)}]
        return await self._generate("polish", messages, self.fast_model, temperature=0.3, max_tokens=POLISH_MAX_TOKENS)

    async def converse(self, history: list[HistoryTurn]) -> Result[str]:
        messages = [{"role": "system", "content": build_chat_system_prompt(self.company)}]
        messages.extend(_history_messages(history))
        return await self._generate("chat", messages, self.chat_model, max_tokens=CHAT_MAX_TOKENS)

    async def _help_context(self) -> tuple[dict[str, list[str]], list]:
        if self.sheets is None:
            return self.company.workflows, []
        workflows, submissions = await asyncio.gather(
            self.sheets.get_workflows(),
            self.sheets.get_approved_submissions(),
        )
        return workflows or self.company.workflows, submissions

    async def help_converse(
        self,
        history: list[HistoryTurn],
        challenge: str,
        department: Optional[str] = None,
    ) -> Result[str]:
        """Answer a help-seeker, grounded in the tool catalogue and past wins."""
        workflows, submissions = await self._help_context()
        system_prompt = build_help_system_prompt(self.company, challenge, department, workflows, submissions)
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(_history_messages(history))
        return await self._generate("help", messages, self.chat_model, max_tokens=HELP_MAX_TOKENS)

    async def weekly_tip(self) -> Result[str]:
        messages = [{"role": "user", "content": build_weekly_tip_prompt(self.company)}]
        return await self._generate("weekly_tip", messages, self.fast_model, temperature=0.9, max_tokens=TIP_MAX_TOKENS)
