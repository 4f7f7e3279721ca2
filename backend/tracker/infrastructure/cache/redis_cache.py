"""Redis-backed implementation of the KeyValueCache port.

Shared by every worker process, so an invalidation in one worker is seen by
all of them. Values are stored as JSON text.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis_async

from tracker.application.interfaces import KeyValueCache

logger = logging.getLogger(__name__)


class RedisKeyValueCache(KeyValueCache):
    """Stores JSON-encoded values with a Redis expiry per key.

    Connection and protocol errors propagate to the caller; the entity
    directory cache already treats them as misses.
    """

    def __init__(self, client: redis_async.Redis, *, key_prefix: str = "tracker:"):
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, *, key_prefix: str = "tracker:") -> "RedisKeyValueCache":
        client = redis_async.from_url(url, decode_responses=True)
        logger.info("Redis cache configured at %s", url)
        return cls(client, key_prefix=key_prefix)

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self._client.setex(self._key(key), ttl_seconds, json.dumps(value))

    async def delete(self, key: str) -> None:
        await self._client.delete(self._key(key))

    async def close(self) -> None:
        await self._client.aclose()

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"
