"""Tests for CacheStatsCollector — cell hit/load tracking."""

from __future__ import annotations

import pytest

from slicetable.data.cache_stats import CacheStats, CacheStatsCollector


class TestCacheStats:
    def test_empty(self):
        s = CacheStats()
        assert s.total == 0
        assert s.hit_rate == 0.0

    def test_mixed(self):
        s = CacheStats(hits=7, misses=3)
        assert s.hit_rate == pytest.approx(0.7)
        assert s.total == 10


class TestCacheStatsCollector:
    def test_record_hits_and_loads(self):
        c = CacheStatsCollector()
        c.record_hits("name", 10)
        c.record_load("name", 5)
        c.record_load("name", 5)
        assert c.get("name") == CacheStats(hits=10, misses=10, loads=2)

    def test_non_positive_hits_are_ignored(self):
        c = CacheStatsCollector()
        c.record_hits("name", 0)
        assert c.all() == {}

    def test_all_and_total(self):
        c = CacheStatsCollector()
        c.record_hits("b", 1)
        c.record_load("a", 4)
        assert list(c.all()) == ["a", "b"]
        assert c.total() == CacheStats(hits=1, misses=4, loads=1)

    def test_reset(self):
        c = CacheStatsCollector()
        c.record_hits("a", 1)
        c.record_hits("b", 1)
        c.reset("a")
        assert c.get("a").hits == 0
        assert c.get("b").hits == 1
        c.reset()
        assert c.total() == CacheStats()
