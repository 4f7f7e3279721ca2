"""Abstract key-value cache with per-entry TTL."""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueCache(ABC):
    """Port for a TTL cache. Used only as a performance optimization."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss or expiry."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Drop a key if present."""
        ...
