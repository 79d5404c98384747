from pathlib import Path

import pytest

from dfs_projector.cache.sqlite_store import SqliteCacheStore


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> SqliteCacheStore:
    return SqliteCacheStore(":memory:", clock=clock)


class TestGetPut:
    def test_miss(self, store: SqliteCacheStore) -> None:
        assert store.get("player", "1") is None

    def test_put_then_get(self, store: SqliteCacheStore) -> None:
        store.put("player", "1", '{"name": "A"}', ttl_seconds=60)
        assert store.get("player", "1") == '{"name": "A"}'

    def test_namespaces_are_separate(self, store: SqliteCacheStore) -> None:
        store.put("player", "1", "a", ttl_seconds=60)
        assert store.get("batter_stats", "1") is None

    def test_put_overwrites(self, store: SqliteCacheStore) -> None:
        store.put("player", "1", "old", ttl_seconds=60)
        store.put("player", "1", "new", ttl_seconds=60)
        assert store.get("player", "1") == "new"

    def test_expired_entry_is_dropped(self, store: SqliteCacheStore, clock: FakeClock) -> None:
        store.put("environment", "745000", "{}", ttl_seconds=30)
        clock.now += 29
        assert store.get("environment", "745000") == "{}"
        clock.now += 1
        assert store.get("environment", "745000") is None
        clock.now -= 10
        assert store.get("environment", "745000") is None


class TestRemoval:
    def test_invalidate_key(self, store: SqliteCacheStore) -> None:
        store.put("player", "1", "a", ttl_seconds=60)
        store.put("player", "2", "b", ttl_seconds=60)
        store.invalidate("player", "1")
        assert store.get("player", "1") is None
        assert store.get("player", "2") == "b"

    def test_invalidate_namespace(self, store: SqliteCacheStore) -> None:
        store.put("player", "1", "a", ttl_seconds=60)
        store.put("schedule", "2024-07-04", "[]", ttl_seconds=60)
        store.invalidate("player")
        assert store.get("player", "1") is None
        assert store.get("schedule", "2024-07-04") == "[]"

    def test_clear_returns_removed_count(self, store: SqliteCacheStore) -> None:
        store.put("player", "1", "a", ttl_seconds=60)
        store.put("schedule", "2024-07-04", "[]", ttl_seconds=60)
        assert store.clear() == 2
        assert store.clear() == 0

    def test_purge_expired(self, store: SqliteCacheStore, clock: FakeClock) -> None:
        store.put("environment", "1", "{}", ttl_seconds=10)
        store.put("player", "1", "a", ttl_seconds=100)
        clock.now += 50
        assert store.purge_expired() == 1
        assert store.namespaces() == {"player": 1}


class TestNamespaces:
    def test_counts_live_entries(self, store: SqliteCacheStore, clock: FakeClock) -> None:
        store.put("schedule", "2024-07-04", "[]", ttl_seconds=60)
        store.put("player", "1", "a", ttl_seconds=60)
        store.put("player", "2", "b", ttl_seconds=60)
        store.put("environment", "1", "{}", ttl_seconds=5)
        clock.now += 10
        assert list(store.namespaces().items()) == [("player", 2), ("schedule", 1)]

    def test_empty(self, store: SqliteCacheStore) -> None:
        assert store.namespaces() == {}


class TestFileStore:
    def test_creates_parent_directory_and_persists(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "cache.db"
        first = SqliteCacheStore(db_path)
        first.put("player", "1", "a", ttl_seconds=3600)
        first.close()

        second = SqliteCacheStore(db_path)
        try:
            assert db_path.exists()
            assert second.get("player", "1") == "a"
        finally:
            second.close()
