from typing import Any, Optional

from pydantic import ValidationError

from innovators.logging_config import get_logger
from innovators.schemas.session import (
    SESSION_ADAPTER,
    ChatSession,
    HelpSession,
    HelpStep,
    HistoryTurn,
    Mode,
    Session,
    SubmitSession,
    dump_session,
    load_session,
)
from innovators.services.kv_store import KeyValueBackend

logger = get_logger("session_store")

SESSION_KEY_PREFIX = "innovators:session"
DEFAULT_SESSION_TTL_SECONDS = 30 * 60


class ModeChangeError(Exception):
    """Raised when a save would change an existing session's mode in place."""


class SessionStore:
    """Per-user conversation state with a sliding expiry.

    Every write resets the expiry to now + ttl_seconds.
    """

    def __init__(self, backend: KeyValueBackend, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS):
        self.backend = backend
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}:{user_id}"

    @staticmethod
    def _decode(user_id: str, raw: Optional[str]) -> Optional[Session]:
        if raw is None:
            return None
        try:
            return load_session(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding unreadable session",
                extra={"context": {"user_id": user_id, "error": str(e)}},
            )
            return None

    async def get(self, user_id: str) -> Optional[Session]:
        raw = await self.backend.get(self._key(user_id))
        return self._decode(user_id, raw)

    async def save(self, session: Session) -> Session:
        """Write the whole session. A different mode must go through replace()."""
        key = self._key(session.user_id)

        def _write(current: Optional[str]) -> str:
            existing = self._decode(session.user_id, current)
            if existing is not None and existing.mode != session.mode:
                raise ModeChangeError(f"Session mode cannot change in place: {existing.mode} -> {session.mode}")
            return dump_session(session)

        await self.backend.transform(key, _write, self.ttl_seconds)
        return session

    async def replace(self, session: Session) -> Session:
        """Drop whatever session the user has and start this one."""
        await self.delete(session.user_id)
        await self.backend.set(self._key(session.user_id), dump_session(session), self.ttl_seconds)
        return session

    async def create_submit(self, user_id: str) -> SubmitSession:
        return await self.replace(SubmitSession(user_id=user_id))

    async def create_help(self, user_id: str, skip_department: bool = False) -> HelpSession:
        step = HelpStep.CHALLENGE if skip_department else HelpStep.DEPARTMENT
        return await self.replace(HelpSession(user_id=user_id, step=step))

    async def create_chat(self, user_id: str) -> ChatSession:
        return await self.replace(ChatSession(user_id=user_id))

    async def create(self, user_id: str, mode: Mode) -> Session:
        mode = Mode(mode)
        if mode == Mode.SUBMIT:
            return await self.create_submit(user_id)
        if mode == Mode.HELP:
            return await self.create_help(user_id)
        return await self.create_chat(user_id)

    async def update(self, user_id: str, **fields: Any) -> Optional[Session]:
        """Merge fields into the existing session. Returns None if there is none."""
        if "mode" in fields or "user_id" in fields:
            raise ValueError("mode and user_id cannot be updated")

        updated: dict[str, Session] = {}

        def _merge(current: Optional[str]) -> Optional[str]:
            existing = self._decode(user_id, current)
            if existing is None:
                return None
            merged = SESSION_ADAPTER.validate_python({**existing.model_dump(), **fields})
            updated["session"] = merged
            return dump_session(merged)

        await self.backend.transform(self._key(user_id), _merge, self.ttl_seconds)
        return updated.get("session")

    async def append_history(self, user_id: str, role: str, content: str) -> Optional[ChatSession]:
        """Append a turn to a chat session's history. Other modes are left untouched."""
        updated: dict[str, ChatSession] = {}

        def _append(current: Optional[str]) -> Optional[str]:
            existing = self._decode(user_id, current)
            if not isinstance(existing, ChatSession):
                return None
            history = [*existing.conversation_history, HistoryTurn(role=role, content=content)]
            session = existing.model_copy(update={"conversation_history": history})
            updated["session"] = session
            return dump_session(session)

        await self.backend.transform(self._key(user_id), _append, self.ttl_seconds)
        return updated.get("session")

    async def delete(self, user_id: str) -> None:
        await self.backend.delete(self._key(user_id))

    async def ttl(self, user_id: str) -> Optional[int]:
        return await self.backend.ttl(self._key(user_id))
