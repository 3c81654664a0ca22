"""
In-process caching for the airline assistant.

Two TTL-governed caches are used: one for the scraped knowledge base (the
aggregate plus one entry per page) and one for the flight API bearer token.
Instances are created by the service container and injected into the
components that use them.

There is no locking. Under asyncio each get or set is atomic with respect to
other coroutines, but a whole miss-fetch-store sequence is not, so
concurrent misses may each trigger their own refresh.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import structlog


class CacheKeyType(str, Enum):
    """Types of cache keys"""
    KNOWLEDGE_BASE = "knowledge"
    KNOWLEDGE_PAGE = "page"
    ACCESS_TOKEN = "token"


@dataclass
class CacheEntry:
    """A cached value and when it was stored"""
    value: Any
    stored_at: float
    ttl_seconds: float

    def is_valid(self, now: float) -> bool:
        return now - self.stored_at < self.ttl_seconds


class TTLCache:
    """
    Dictionary-backed cache whose entries expire after a time-to-live.

    Args:
        default_ttl: TTL in seconds used when set() gets no override
        clock: monotonic time source, injectable for tests
        name: label used in log events
    """

    def __init__(
        self,
        default_ttl: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        self.default_ttl = default_ttl
        self.clock = clock
        self.name = name
        self._entries: Dict[str, CacheEntry] = {}
        self.logger = structlog.get_logger("cache").bind(cache=name)

    @staticmethod
    def make_key(key_type: CacheKeyType, identifier: str) -> str:
        """
        Generate a cache key with consistent format.

        Args:
            key_type: Type of cache key
            identifier: Primary identifier

        Returns:
            Generated cache key
        """
        return f"{key_type.value}:{identifier}"

    def get(self, key: str) -> Optional[Any]:
        """Get a value if present and not expired"""
        entry = self._entries.get(key)
        if entry is None:
            self.logger.debug("Cache miss", key=key)
            return None

        if not entry.is_valid(self.clock()):
            self.logger.debug("Cache entry expired", key=key)
            del self._entries[key]
            return None

        self.logger.debug("Cache hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl_override: Optional[float] = None) -> None:
        """Store a value, replacing any previous entry"""
        ttl = self.default_ttl if ttl_override is None else ttl_override
        self._entries[key] = CacheEntry(value=value, stored_at=self.clock(), ttl_seconds=ttl)
        self.logger.debug("Cache set", key=key, ttl=ttl)

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Raw entry access, expired or not"""
        return self._entries.get(key)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._entries.clear()
        self.logger.info("Cache cleared")

    def __len__(self) -> int:
        return len(self._entries)
