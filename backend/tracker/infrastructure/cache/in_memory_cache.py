"""Process-local TTL cache implementing the KeyValueCache port."""

import time
from collections.abc import Callable
from typing import Any

from tracker.application.interfaces import KeyValueCache


class InMemoryKeyValueCache(KeyValueCache):
    """Dictionary-backed cache with per-entry expiry.

    ``clock`` returns monotonic seconds; tests inject a fake to move time.
    Expired entries are dropped lazily on read. Each operation completes
    without awaiting, so entries are always replaced whole.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, value)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)
