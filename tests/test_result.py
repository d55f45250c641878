from innovators.services.result import LLM_ERROR, Result


class TestResult:
    def test_success(self):
        result = Result.success("summary")
        assert result.ok is True
        assert result.value == "summary"
        assert result.error is None

    def test_failure(self):
        result = Result.failure("OpenAI down", code="llm_error")
        assert result.ok is False
        assert result.value is None
        assert result.error_code == "llm_error"

    def test_failure_defaults_to_llm_error(self):
        assert Result.failure("oops").error_code == LLM_ERROR

    def test_failure_custom_code(self):
        assert Result.failure("oops", code="timeout").error_code == "timeout"
