from typing import List, Optional

import httpx

from innovators.logging_config import get_logger
from innovators.services.llm.base import LLMError, LLMProvider, LLMResponse

logger = get_logger("llm.openai")


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions provider."""

    def __init__(self, api_key: str, default_model: str = "gpt-4o-mini", timeout_seconds: float = 60.0):
        self.api_key = api_key
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds
        self.base_url = "https://api.openai.com/v1/chat/completions"

    async def generate(
        self,
        messages: List[dict],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> LLMResponse:
        """Generate response from OpenAI."""
        if not self.api_key:
            raise LLMError("OPENAI_API_KEY not configured")

        model = model or self.default_model
        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        logger.debug(f"OpenAI request: model={model}, messages_count={len(messages)}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    self.base_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise LLMError(f"OpenAI request failed: {e}") from e

        logger.debug(f"OpenAI response status: {response.status_code}")

        if response.status_code != 200:
            logger.error(f"OpenAI error: {response.text}")
            raise LLMError(f"OpenAI API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"unexpected body type {type(data).__name__}")
            content = ""
            if data.get("choices"):
                message = data["choices"][0].get("message") or {}
                content = message.get("content") or ""
        except (ValueError, TypeError, AttributeError, LookupError) as e:
            logger.error(f"OpenAI returned an unreadable body: {e}")
            raise LLMError(f"OpenAI returned an unreadable body: {e}") from e

        if not isinstance(content, str):
            raise LLMError("OpenAI returned a non-text completion")
        if not content.strip():
            raise LLMError("OpenAI returned an empty completion")

        return LLMResponse(
            content=content.strip(),
            model=data.get("model", model),
            usage=data.get("usage"),
        )
