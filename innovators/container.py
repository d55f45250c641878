from dataclasses import dataclass

from fastapi import Request

from innovators.config import Settings, settings
from innovators.logging_config import get_logger
from innovators.services.command_service import CommandDispatcher
from innovators.services.company_context import CompanyContext, load_company_context
from innovators.services.conversation_service import AccessPolicy, ConversationRouter
from innovators.services.dedup_service import EventDeduplicator
from innovators.services.generation_service import GenerationService
from innovators.services.kv_store import KeyValueBackend, build_backend
from innovators.services.llm import OpenAIProvider
from innovators.services.session_store import SessionStore
from innovators.services.sheets_service import SheetsService
from innovators.services.slack_service import SlackService

logger = get_logger("container")


@dataclass
class BotContainer:
    """Everything a request needs, built once per process."""

    settings: Settings
    backend: KeyValueBackend
    company: CompanyContext
    sessions: SessionStore
    dedup: EventDeduplicator
    slack: SlackService
    sheets: SheetsService
    generation: GenerationService
    router: ConversationRouter
    commands: CommandDispatcher

    async def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if close is not None:
            await close()


def assemble_container(
    settings: Settings,
    backend: KeyValueBackend,
    company: CompanyContext,
    slack: SlackService,
    sheets: SheetsService,
    generation: GenerationService,
) -> BotContainer:
    sessions = SessionStore(backend, ttl_seconds=settings.session_ttl_seconds)
    access = AccessPolicy(settings.private_mode, settings.allowed_user_ids)
    return BotContainer(
        settings=settings,
        backend=backend,
        company=company,
        sessions=sessions,
        dedup=EventDeduplicator(backend, ttl_seconds=settings.dedup_ttl_seconds),
        slack=slack,
        sheets=sheets,
        generation=generation,
        router=ConversationRouter(sessions, slack, generation, sheets, company, access),
        commands=CommandDispatcher(sessions, slack, sheets, company, settings.admin_user_id, access),
    )


def build_container(settings: Settings) -> BotContainer:
    company = load_company_context(settings.company_context_path)
    backend = build_backend(settings.session_backend, settings.redis_url, settings.redis_socket_timeout_seconds)
    slack = SlackService(settings.slack_bot_token, settings.slack_channel_id, settings.admin_user_id)
    sheets = SheetsService.from_credentials(
        settings.google_credentials, settings.google_sheet_id, settings.submissions_cache_seconds
    )
    provider = OpenAIProvider(
        settings.openai_api_key, default_model=settings.fast_model, timeout_seconds=settings.llm_timeout_seconds
    )
    generation = GenerationService(provider, company, settings.fast_model, settings.chat_model, sheets=sheets)
    logger.info(
        "Container built",
        extra={"context": {"session_backend": settings.session_backend, "sheets_configured": sheets.configured}},
    )
    return assemble_container(settings, backend, company, slack, sheets, generation)


def get_container(request: Request) -> BotContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        container = build_container(settings)
        request.app.state.container = container
    return container
