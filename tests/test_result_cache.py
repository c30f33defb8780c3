import threading

import pytest

from mailguard.cache import NullCache, TTLLRUCache, build_cache
from mailguard.config import MailGuardConfig
from mailguard.models import ClassificationOutcome, ThreatCategory

SPAM = ClassificationOutcome.listed(ThreatCategory.spam())
CLEAN = ClassificationOutcome.clean()


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_cache_set_and_get():
    cache = TTLLRUCache()
    assert cache.stats() == 0

    cache.put("example.com", SPAM)

    assert cache.stats() == 1
    assert cache.get("example.com") == SPAM


def test_clean_outcomes_are_cached_too():
    cache = TTLLRUCache()
    cache.put("example.com", CLEAN)
    assert cache.get("example.com") == CLEAN


def test_cache_get_nonexistent():
    assert TTLLRUCache().get("nonexistent.com") is None


def test_entry_is_stale_exactly_at_ttl():
    clock = FakeClock()
    cache = TTLLRUCache(ttl=300, clock=clock)
    cache.put("example.com", SPAM)

    clock.now += 299.999
    assert cache.get("example.com") == SPAM

    clock.now = 1_000.0 + 300
    assert cache.get("example.com") is None


def test_stale_read_removes_entry():
    clock = FakeClock()
    cache = TTLLRUCache(ttl=10, clock=clock)
    cache.put("a.com", SPAM)
    cache.put("b.com", CLEAN)

    clock.now += 10
    assert cache.get("a.com") is None
    assert cache.stats() == 1


def test_overwrite_resets_timestamp():
    clock = FakeClock()
    cache = TTLLRUCache(ttl=10, clock=clock)
    cache.put("a.com", CLEAN)

    clock.now += 8
    cache.put("a.com", SPAM)
    clock.now += 8

    assert cache.get("a.com") == SPAM
    assert cache.stats() == 1


def test_capacity_evicts_least_recently_used():
    cache = TTLLRUCache(capacity=3)
    for domain in ("a.com", "b.com", "c.com"):
        cache.put(domain, CLEAN)

    # Touch a.com so b.com becomes the oldest
    assert cache.get("a.com") == CLEAN
    cache.put("d.com", SPAM)

    assert cache.stats() == 3
    assert cache.get("b.com") is None
    for domain in ("a.com", "c.com", "d.com"):
        assert cache.get(domain) is not None


def test_capacity_plus_one_evicts_exactly_one():
    cache = TTLLRUCache(capacity=100)
    domains = [f"domain{i}.com" for i in range(101)]
    for domain in domains:
        cache.put(domain, CLEAN)

    assert cache.stats() == 100
    assert cache.get(domains[0]) is None
    assert all(cache.get(d) is not None for d in domains[1:])


def test_put_refreshes_recency():
    cache = TTLLRUCache(capacity=2)
    cache.put("a.com", CLEAN)
    cache.put("b.com", CLEAN)
    cache.put("a.com", SPAM)  # overwrite, no eviction
    assert cache.stats() == 2

    cache.put("c.com", CLEAN)
    assert cache.get("b.com") is None
    assert cache.get("a.com") == SPAM


def test_cache_clear():
    cache = TTLLRUCache()
    cache.put("example1.com", SPAM)
    cache.put("example2.com", CLEAN)
    assert cache.stats() == 2

    cache.clear()
    assert cache.stats() == 0


def test_cache_clear_expired():
    clock = FakeClock()
    cache = TTLLRUCache(ttl=60, clock=clock)
    cache.put("old1.com", SPAM)
    cache.put("old2.com", CLEAN)
    clock.now += 30
    cache.put("new.com", CLEAN)
    clock.now += 30

    assert cache.clear_expired() == 2
    assert cache.stats() == 1
    assert cache.get("new.com") == CLEAN


@pytest.mark.parametrize("kwargs", [{"ttl": 0}, {"ttl": -1}, {"capacity": 0}])
def test_invalid_construction(kwargs):
    with pytest.raises(ValueError):
        TTLLRUCache(**kwargs)


def test_cache_thread_safety():
    cache = TTLLRUCache(capacity=50)

    def writer(worker: int):
        for i in range(200):
            domain = f"w{worker}-{i}.com"
            cache.put(domain, SPAM)
            cache.get(domain)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.stats() == 50


def test_null_cache_never_stores():
    cache = NullCache()
    cache.put("example.com", SPAM)

    assert cache.get("example.com") is None
    assert cache.stats() is None
    assert cache.clear_expired() == 0
    cache.clear()


def test_build_cache_follows_config():
    enabled = build_cache(MailGuardConfig(cache_ttl=42, cache_capacity=7))
    assert isinstance(enabled, TTLLRUCache)
    assert enabled.ttl == 42
    assert enabled.capacity == 7

    assert isinstance(build_cache(MailGuardConfig(cache_enabled=False)), NullCache)
