"""Tests for the in-memory cache tier."""

import threading

from src.tvmclient.cache.memory import MemoryCache, get_process_cache


class TestMemoryCache:
    """Test MemoryCache class."""

    def test_get_missing_key(self):
        assert MemoryCache().get("missing") is None

    def test_set_and_get(self):
        cache = MemoryCache()
        cache.set("key", {"expiration": "x", "accessKeyId": "fake"})

        assert cache.get("key") == {"expiration": "x", "accessKeyId": "fake"}
        assert "key" in cache
        assert len(cache) == 1

    def test_records_are_copied(self):
        """Test that neither the stored nor the returned record can be mutated from outside."""
        cache = MemoryCache()
        record = {"params": {"Bucket": "fake"}}
        cache.set("key", record)

        record["params"]["Bucket"] = "changed"
        returned = cache.get("key")
        returned["params"]["Bucket"] = "changed again"

        assert cache.get("key") == {"params": {"Bucket": "fake"}}

    def test_merge_missing_keeps_existing_entries(self):
        cache = MemoryCache()
        cache.set("a", {"value": "memory"})

        added = cache.merge_missing({"a": {"value": "file"}, "b": {"value": "file"}})

        assert added == 1
        assert cache.get("a") == {"value": "memory"}
        assert cache.get("b") == {"value": "file"}

    def test_merge_missing_skips_non_mappings(self):
        cache = MemoryCache()
        added = cache.merge_missing({"a": "not a record", "b": None, "c": {"ok": True}})

        assert added == 1
        assert "a" not in cache
        assert cache.get("c") == {"ok": True}

    def test_snapshot_and_clear(self):
        cache = MemoryCache()
        cache.set("a", {"v": 1})
        cache.set("b", {"v": 2})

        snapshot = cache.snapshot()
        cache.clear()

        assert snapshot == {"a": {"v": 1}, "b": {"v": 2}}
        assert len(cache) == 0

    def test_concurrent_writers(self):
        cache = MemoryCache()

        def writer(prefix):
            for i in range(100):
                cache.set(f"{prefix}-{i}", {"i": i})

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 400


def test_process_cache_is_shared():
    """Test that every caller gets the same process-wide instance."""
    assert get_process_cache() is get_process_cache()
    get_process_cache().set("shared", {"v": 1})
    assert get_process_cache().get("shared") == {"v": 1}
