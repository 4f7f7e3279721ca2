from .in_memory_cache import InMemoryKeyValueCache
from .redis_cache import RedisKeyValueCache

__all__ = ["InMemoryKeyValueCache", "RedisKeyValueCache"]
