"""Tests for the in-memory multi-version store."""

import pytest

from kvscope.errors import KeyNotFoundError, StoreError
from kvscope.store.memory import MemoryStore


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mem(clock):
    return MemoryStore(clock=clock)


def test_iterates_in_key_order(mem):
    for key in [b"/b/2", b"/a/1", b"/c/3", b"/a/0"]:
        mem.put(key, b"v")
    with mem.view() as snap:
        assert [item.key for item in snap.iterate()] == [b"/a/0", b"/a/1", b"/b/2", b"/c/3"]


def test_prefix_restricts_iteration(mem):
    for key in [b"/a/1", b"/ab/1", b"/b/1"]:
        mem.put(key, b"v")
    with mem.view() as snap:
        assert [item.key for item in snap.iterate(b"/a/")] == [b"/a/1"]


def test_estimated_size_is_key_plus_value(mem):
    mem.put(b"key", b"value")
    with mem.view() as snap:
        [item] = list(snap.iterate())
    assert item.estimated_size == len(b"key") + len(b"value")


def test_all_versions_newest_first(mem):
    first = mem.put(b"k", b"1")
    second = mem.put(b"k", b"22")
    with mem.view() as snap:
        versions = list(snap.iterate(all_versions=True))
        latest = list(snap.iterate())
    assert [item.version for item in versions] == [second, first]
    assert [item.estimated_size for item in versions] == [3, 2]
    assert [item.version for item in latest] == [second]


def test_tombstone_hides_key_but_keeps_versions(mem):
    mem.put(b"k", b"v")
    mem.delete(b"k")
    with mem.view() as snap:
        assert list(snap.iterate()) == []
        versions = list(snap.iterate(all_versions=True))
        with pytest.raises(KeyNotFoundError):
            snap.get(b"k")
    assert [item.is_deleted_or_expired for item in versions] == [True, False]


def test_ttl_expiry(mem, clock):
    mem.put(b"k", b"v", ttl=10)
    with mem.view() as snap:
        assert snap.get(b"k") == b"v"
    clock.now += 10
    with mem.view() as snap:
        with pytest.raises(KeyNotFoundError):
            snap.get(b"k")
        [item] = list(snap.iterate(all_versions=True))
    assert item.is_deleted_or_expired


def test_snapshot_is_isolated_from_later_writes(mem):
    mem.put(b"a", b"old")
    with mem.view() as snap:
        mem.put(b"a", b"new")
        mem.put(b"b", b"added")
        mem.delete(b"a")
        assert snap.get(b"a") == b"old"
        assert [item.key for item in snap.iterate(all_versions=True)] == [b"a"]
    with mem.view() as snap:
        assert [item.key for item in snap.iterate()] == [b"b"]


def test_view_closes_snapshot_on_error(mem):
    with pytest.raises(RuntimeError):
        with mem.view() as snap:
            raise RuntimeError("boom")
    assert snap.closed
    with pytest.raises(StoreError, match="closed"):
        snap.get(b"a")


def test_get_missing_key(mem):
    with mem.view() as snap:
        with pytest.raises(KeyNotFoundError) as exc_info:
            snap.get(b"nope")
    assert exc_info.value.key == b"nope"


def test_storage_tables(mem):
    assert mem.storage_tables() == []
    mem.put(b"/a", b"12")
    mem.put(b"/a", b"3")
    mem.put(b"/z", b"")
    [info] = mem.storage_tables()
    assert info.level == 0
    assert info.left_key == "/a"
    assert info.right_key == "/z"
    assert info.key_count == 3
    assert info.size == (2 + 2) + (2 + 1) + 2
