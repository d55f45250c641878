import asyncio
from unittest.mock import AsyncMock, Mock

from innovators.services.dedup_service import EventDeduplicator
from innovators.services.kv_store import MemoryBackend


class TestEventDeduplicator:
    def test_first_delivery_processed_retry_ignored(self):
        dedup = EventDeduplicator(MemoryBackend())
        assert asyncio.run(dedup.should_process("evt-1")) is True
        assert asyncio.run(dedup.should_process("evt-1")) is False
        assert asyncio.run(dedup.should_process("evt-2")) is True

    def test_forgotten_after_ttl(self):
        now = [1000.0]
        dedup = EventDeduplicator(MemoryBackend(clock=lambda: now[0]), ttl_seconds=60)
        assert asyncio.run(dedup.should_process("evt-1")) is True
        now[0] += 61
        assert asyncio.run(dedup.should_process("evt-1")) is True

    def test_empty_id_always_processed(self):
        dedup = EventDeduplicator(MemoryBackend())
        assert asyncio.run(dedup.should_process("")) is True
        assert asyncio.run(dedup.should_process(None)) is True

    def test_backend_error_fails_open(self):
        backend = Mock()
        backend.set_if_absent = AsyncMock(side_effect=ConnectionError("redis down"))
        dedup = EventDeduplicator(backend)
        assert asyncio.run(dedup.should_process("evt-1")) is True
