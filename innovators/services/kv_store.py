"""Key-value backends shared by the session store and the event deduplicator."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import redis.asyncio as redis_async
from redis.exceptions import WatchError

from innovators.logging_config import get_logger

logger = get_logger("kv_store")

Transform = Callable[[Optional[str]], Optional[str]]

MAX_TRANSFORM_RETRIES = 5


class KeyValueBackend(ABC):
    """String key-value storage with per-key expiry."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store value only when key is missing. Returns True if it was stored."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def ttl(self, key: str) -> Optional[int]:
        """Seconds until key expires, or None if it does not exist."""
        pass

    @abstractmethod
    async def transform(self, key: str, func: Transform, ttl_seconds: int) -> Optional[str]:
        """Atomically read key, apply func and write the result back.

        When func returns None nothing is written and None is returned.
        """
        pass


@dataclass
class _Entry:
    value: str
    expires_at: float


class MemoryBackend(KeyValueBackend):
    """Process-local backend for single-instance deployments and tests.

    Every method finishes without yielding to the event loop, so transform
    is atomic with respect to other coroutines.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def _write(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        entry = self._live_entry(key)
        return entry.value if entry else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._write(key, value, ttl_seconds)

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        if self._live_entry(key) is not None:
            return False
        self._write(key, value, ttl_seconds)
        return True

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def ttl(self, key: str) -> Optional[int]:
        entry = self._live_entry(key)
        if entry is None:
            return None
        return max(int(entry.expires_at - self._clock()), 0)

    async def transform(self, key: str, func: Transform, ttl_seconds: int) -> Optional[str]:
        entry = self._live_entry(key)
        new_value = func(entry.value if entry else None)
        if new_value is None:
            return None
        self._write(key, new_value, ttl_seconds)
        return new_value


class RedisBackend(KeyValueBackend):
    """Shared backend for multi-instance deployments."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str, socket_timeout_seconds: float = 0.5) -> "RedisBackend":
        client = redis_async.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout_seconds,
            socket_timeout=socket_timeout_seconds,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.client.set(key, value, ex=ttl_seconds)

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        was_set = await self.client.set(key, value, ex=ttl_seconds, nx=True)
        return bool(was_set)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def ttl(self, key: str) -> Optional[int]:
        remaining = await self.client.ttl(key)
        # -2: missing key, -1: key without expiry
        if remaining is None or remaining == -2:
            return None
        return max(int(remaining), 0)

    async def transform(self, key: str, func: Transform, ttl_seconds: int) -> Optional[str]:
        for attempt in range(MAX_TRANSFORM_RETRIES):
            async with self.client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    current = await pipe.get(key)
                    new_value = func(current)
                    if new_value is None:
                        await pipe.unwatch()
                        return None
                    pipe.multi()
                    pipe.set(key, new_value, ex=ttl_seconds)
                    await pipe.execute()
                    return new_value
                except WatchError:
                    logger.info(
                        "Concurrent write detected, retrying",
                        extra={"context": {"key": key, "attempt": attempt + 1}},
                    )
        raise RuntimeError(f"Could not update {key} after {MAX_TRANSFORM_RETRIES} attempts")

    async def close(self) -> None:
        await self.client.aclose()


def build_backend(kind: str, redis_url: str, socket_timeout_seconds: float) -> KeyValueBackend:
    if kind == "redis":
        logger.info("Using redis key-value backend")
        return RedisBackend.from_url(redis_url, socket_timeout_seconds)
    if kind != "memory":
        raise ValueError(f"Unknown SESSION_BACKEND: {kind}")
    return MemoryBackend()
