from innovators.logging_config import get_logger
from innovators.services.kv_store import KeyValueBackend

logger = get_logger("dedup_service")

DEDUP_KEY_PREFIX = "innovators:dedup"
DEFAULT_DEDUP_TTL_SECONDS = 60


class EventDeduplicator:
    """Remembers recently seen Slack event ids so retried deliveries run once."""

    def __init__(self, backend: KeyValueBackend, ttl_seconds: int = DEFAULT_DEDUP_TTL_SECONDS):
        self.backend = backend
        self.ttl_seconds = ttl_seconds

    async def should_process(self, event_id: str | None) -> bool:
        if not event_id:
            return True

        key = f"{DEDUP_KEY_PREFIX}:{event_id}"
        try:
            was_set = await self.backend.set_if_absent(key, "1", self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Dedup backend unavailable, processing event anyway: {e}")
            return True

        if not was_set:
            logger.info("Duplicate event ignored", extra={"context": {"event_id": event_id}})
        return was_set
