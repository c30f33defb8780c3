"""Domain-level cache for reputation lookups.

Caches classification outcomes by domain so batches and concurrent checks
of the same domain do not repeat DNS round-trips. Entries expire after a
TTL and the least-recently-used entry is evicted once capacity is reached.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from .config import DEFAULT_CACHE_CAPACITY, DEFAULT_CACHE_TTL, MailGuardConfig
from .models import ClassificationOutcome

logger = logging.getLogger("mailguard.cache")


@dataclass
class CacheEntry:
    """Cached outcome for a single domain."""
    outcome: ClassificationOutcome
    inserted_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.inserted_at >= ttl


class ResultCache(ABC):
    """Interface shared by the active and the disabled cache."""

    @abstractmethod
    def get(self, domain: str) -> Optional[ClassificationOutcome]:
        """Return the cached outcome, or None on a miss or a stale entry."""

    @abstractmethod
    def put(self, domain: str, outcome: ClassificationOutcome) -> None:
        """Insert or overwrite the outcome for a domain."""

    @abstractmethod
    def stats(self) -> Optional[int]:
        """Number of stored entries, or None when caching is disabled."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""

    @abstractmethod
    def clear_expired(self) -> int:
        """Remove stale entries. Returns count of entries removed."""


class NullCache(ResultCache):
    """Stand-in used when caching is turned off: always misses."""

    def get(self, domain: str) -> Optional[ClassificationOutcome]:
        return None

    def put(self, domain: str, outcome: ClassificationOutcome) -> None:
        pass

    def stats(self) -> Optional[int]:
        return None

    def clear(self) -> None:
        pass

    def clear_expired(self) -> int:
        return 0


class TTLLRUCache(ResultCache):
    """In-memory TTL cache with least-recently-used eviction.

    Thread-safe: each operation holds the lock for its whole duration.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._ttl = ttl
        self._capacity = capacity
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, domain: str) -> Optional[ClassificationOutcome]:
        with self._lock:
            entry = self._entries.get(domain)
            if entry is None:
                return None
            if entry.is_expired(self._clock(), self._ttl):
                del self._entries[domain]  # Expired
                logger.debug(f"Cache entry for {domain} expired")
                return None
            self._entries.move_to_end(domain)
            return entry.outcome

    def put(self, domain: str, outcome: ClassificationOutcome) -> None:
        with self._lock:
            if domain in self._entries:
                self._entries.move_to_end(domain)
            elif len(self._entries) >= self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted {evicted}")
            self._entries[domain] = CacheEntry(outcome=outcome, inserted_at=self._clock())

    def stats(self) -> Optional[int]:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def clear_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [
                domain for domain, entry in self._entries.items()
                if entry.is_expired(now, self._ttl)
            ]
            for domain in expired:
                del self._entries[domain]
        return len(expired)


def build_cache(config: MailGuardConfig) -> ResultCache:
    """Pick the cache implementation for a detector from its config."""
    if not config.cache_enabled:
        return NullCache()
    return TTLLRUCache(ttl=config.cache_ttl, capacity=config.cache_capacity)
