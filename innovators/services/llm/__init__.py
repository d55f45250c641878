from innovators.services.llm.base import LLMError, LLMProvider, LLMResponse
from innovators.services.llm.openai_provider import OpenAIProvider

__all__ = ["LLMError", "LLMProvider", "LLMResponse", "OpenAIProvider"]
