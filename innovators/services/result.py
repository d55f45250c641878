from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

LLM_ERROR = "llm_error"


@dataclass
class Result(Generic[T]):
    """Outcome of a generation call. Flows branch on ``ok`` instead of catching provider errors."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def success(value: T) -> "Result[T]":
        return Result(ok=True, value=value)

    @staticmethod
    def failure(error: str, code: str = LLM_ERROR) -> "Result[T]":
        return Result(ok=False, error=error, error_code=code)
