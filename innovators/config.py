from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_COMPANY_CONTEXT_PATH = Path(__file__).resolve().parent / "knowledge" / "company_context.yaml"


class Settings(BaseSettings):
    slack_signing_secret: str = ""
    slack_bot_token: str = ""
    slack_channel_id: str = ""
    admin_user_id: str = ""

    private_mode: bool = False
    allowed_users: str = ""

    openai_api_key: str = ""
    fast_model: str = "gpt-4o-mini"
    chat_model: str = "gpt-4o"
    llm_timeout_seconds: float = 60.0

    session_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout_seconds: float = 0.5
    session_ttl_seconds: int = 30 * 60
    dedup_ttl_seconds: int = 60
    signature_max_age_seconds: int = 300

    google_credentials: str = ""
    google_sheet_id: str = ""
    submissions_cache_seconds: int = 5 * 60

    cron_secret: str = ""
    company_context_path: str = str(DEFAULT_COMPANY_CONTEXT_PATH)
    alert_webhook_url: str = ""
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def allowed_user_ids(self) -> set[str]:
        ids = {item.strip() for item in self.allowed_users.split(",") if item.strip()}
        if self.admin_user_id:
            ids.add(self.admin_user_id)
        return ids


settings = Settings()
