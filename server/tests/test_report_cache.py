"""Tests for the TTL cache and the cached report service."""

import json

from cuke_gateway.services.report_cache import TTLCache
from cuke_gateway.services.report_service import ReportService


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestTTLCache:
    def test_hit_before_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl=300, clock=clock)
        cache.set("index", {"reports": []})
        clock.now = 299.9
        assert cache.get("index") == {"reports": []}

    def test_miss_at_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl=300, clock=clock)
        cache.set("index", 1)
        clock.now = 300
        assert cache.get("index") is None
        assert cache.stats()["size"] == 0

    def test_get_or_load_calls_loader_once(self):
        calls = []
        cache = TTLCache(clock=FakeClock())

        def load():
            calls.append(1)
            return "value"

        assert cache.get_or_load("k", load) == "value"
        assert cache.get_or_load("k", load) == "value"
        assert len(calls) == 1

    def test_invalidate_and_clear(self):
        cache = TTLCache(clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        assert cache.stats() == {"size": 1, "keys": ["b"]}
        cache.clear()
        assert cache.get("b") is None


def test_service_serves_cached_index_until_invalidated(seeded, reports_dir):
    clock = FakeClock()
    service = ReportService(seeded.orchestrator, TTLCache(ttl=300, clock=clock))
    assert len(service.load_index()["reports"]) == 3

    (reports_dir / "d.json").write_text(json.dumps([]))
    seeded.orchestrator.rebuild()
    assert len(service.load_index()["reports"]) == 3

    clock.now = 301
    assert len(service.load_index()["reports"]) == 4

    seeded.orchestrator.delete_report("d.json", soft=True)
    service.invalidate()
    assert len(service.load_index()["reports"]) == 3
