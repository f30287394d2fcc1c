"""Tests for table value access and partitioned key lookup."""

from datetime import timedelta

import pytest

from kvscope.errors import DecodeError, InvalidKeyError, KeyNotFoundError
from kvscope.tables.keys import WatchTableKey
from kvscope.tables.models import KubeWatchResult, WatchType
from kvscope.tables.table import Table
from tests.helpers import HOUR, NOW, pid, watch_key


class TestGet:
    """Tests for fetch-and-decode."""

    def test_decodes_value(self, populated_store, registry):
        with populated_store.view() as snap:
            value = registry.get("watch").get(snap, watch_key(0, "web-0"))
        assert isinstance(value, KubeWatchResult)
        assert value.watch_type == WatchType.UPDATE
        assert value.kind == "Pod"

    def test_missing_key(self, store, registry):
        with store.view() as snap:
            with pytest.raises(KeyNotFoundError):
                registry.get("watch").get(snap, watch_key(0, "missing"))

    def test_rejects_foreign_key(self, populated_store, registry):
        with populated_store.view() as snap:
            with pytest.raises(InvalidKeyError):
                registry.get("watch").get(snap, "/ressum/1705320000/Pod/default/web-0/uid-1")

    def test_corrupt_value(self, store, registry):
        key = watch_key(0, "broken")
        store.put(key.encode(), b"{not json")
        with store.view() as snap:
            with pytest.raises(DecodeError) as exc_info:
                registry.get("watch").get(snap, key)
        assert exc_info.value.key == key

    def test_value_of_wrong_shape(self, store, registry):
        key = watch_key(0, "wrong")
        store.put(key.encode(), b'{"kind": "Pod"}')
        with store.view() as snap:
            with pytest.raises(DecodeError, match="watch value"):
                registry.get("watch").get(snap, key)


class TestPartitionsInWindow:
    """Tests for lookback window partition selection."""

    def test_partitions_overlapping_window(self, registry):
        # Window 10:30..12:30 overlaps the 10:00, 11:00 and 12:00 partitions
        partitions = registry.get("watch").partitions_in_window(2, now=NOW)
        assert partitions == [pid(2), pid(1), pid(0)]

    def test_zero_lookback(self, registry):
        assert registry.get("watch").partitions_in_window(0, now=NOW) == []

    def test_aligned_window_includes_both_edges(self, registry):
        aligned = NOW.replace(minute=0)
        partitions = registry.get("watch").partitions_in_window(1, now=aligned)
        assert len(partitions) == 2

    def test_every_partition_overlaps_window(self, registry):
        lookback = 336
        for partition_id in registry.get("watch").partitions_in_window(lookback, now=NOW):
            start = WatchTableKey.parse(f"/watch/{partition_id}/Pod/ns/n/1").partition_start()
            assert NOW - timedelta(hours=lookback) < start + HOUR
            assert start <= NOW

    def test_partition_wider_than_lookback(self):
        # Daily partitions, 12 hour lookback from 12:30: only today's partition
        daily = Table(WatchTableKey, KubeWatchResult, partition_duration=timedelta(hours=24))
        assert daily.partitions_in_window(12, now=NOW) == ["1705276800"]
        assert daily.partitions_in_window(13, now=NOW) == ["1705190400", "1705276800"]

    def test_partition_wider_than_lookback_finds_todays_keys(self, store):
        daily = Table(WatchTableKey, KubeWatchResult, partition_duration=timedelta(hours=24))
        key = f"/watch/1705276800/Pod/default/web-0/{int(NOW.timestamp()) - 3 * 3600}000000000"
        store.put(key.encode(), b"{}")
        with store.view() as snap:
            assert daily.get_all_keys_for_given_partitions(snap, 10, 1, now=NOW) == [key]


class TestGetAllKeysForGivenPartitions:
    """Tests for bounded partitioned key enumeration."""

    def test_lists_recent_partitions_only(self, populated_store, registry):
        with populated_store.view() as snap:
            keys = registry.get("watch").get_all_keys_for_given_partitions(snap, 100, 4, now=NOW)
        assert keys == [
            watch_key(3, "web-0"),
            watch_key(0, "web-0"),
            watch_key(0, "web-1"),
            watch_key(0, "coredns", namespace="kube-system"),
        ]

    def test_substring_filter(self, populated_store, registry):
        with populated_store.view() as snap:
            keys = registry.get("watch").get_all_keys_for_given_partitions(
                snap, 100, 24, key_search="kube-system", now=NOW
            )
        assert keys == [watch_key(0, "coredns", namespace="kube-system")]

    def test_row_cap(self, populated_store, registry):
        with populated_store.view() as snap:
            keys = registry.get("watch").get_all_keys_for_given_partitions(snap, 2, 24, now=NOW)
        assert len(keys) == 2

    def test_zero_rows(self, populated_store, registry):
        with populated_store.view() as snap:
            assert registry.get("watch").get_all_keys_for_given_partitions(snap, 0, 24, now=NOW) == []

    def test_deleted_keys_are_skipped(self, populated_store, registry):
        populated_store.delete(watch_key(0, "web-1").encode())
        with populated_store.view() as snap:
            keys = registry.get("watch").get_all_keys_for_given_partitions(snap, 100, 1, now=NOW)
        assert watch_key(0, "web-1") not in keys
        assert watch_key(0, "web-0") in keys

    def test_keys_failing_schema_are_skipped(self, populated_store, registry):
        populated_store.put(f"/watch/{pid(0)}/Pod/default/bad/not-a-time".encode(), b"{}")
        with populated_store.view() as snap:
            keys = registry.get("watch").get_all_keys_for_given_partitions(snap, 100, 1, now=NOW)
        assert all(not key.endswith("not-a-time") for key in keys)
