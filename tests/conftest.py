"""Shared fixtures: an in-memory store populated with domain and internal keys."""

import pytest

from kvscope.engine.inspector import KeyspaceInspector
from kvscope.settings import Settings
from kvscope.store.memory import MemoryStore
from kvscope.tables.keys import EventCountKey, ResourceSummaryKey, WatchActivityKey
from kvscope.tables.models import (
    EventCounts,
    KubeWatchResult,
    ResourceEventCounts,
    ResourceSummary,
    WatchActivity,
    WatchType,
)
from kvscope.tables.registry import default_registry
from tests.helpers import HOUR, NOW, pid, watch_key


@pytest.fixture
def config():
    """Settings independent of the environment."""
    return Settings(_env_file=None, backend="memory", internal_prefix="!kv", partition_duration_hours=1)


@pytest.fixture
def registry(config):
    return default_registry(config)


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def populated_store(store, registry):
    """Store with a few keys in every table plus internal bookkeeping keys.

    Layout:
    - watch: 3 keys in the current partition, 1 key 3 hours ago, 1 key 20 hours ago
    - ressum, eventcount, watchactivity: 1 key each in the current partition
    - internal: 2 head keys, 1 move key, 1 discard key, 1 other key
    """
    watch = registry.get("watch")
    for key, name in [
        (watch_key(0, "web-0"), "web-0"),
        (watch_key(0, "web-1"), "web-1"),
        (watch_key(0, "coredns", namespace="kube-system"), "coredns"),
        (watch_key(3, "web-0"), "web-0"),
        (watch_key(20, "old"), "old"),
    ]:
        value = KubeWatchResult(
            timestamp=NOW,
            kind="Pod",
            watch_type=WatchType.UPDATE,
            payload=f'{{"metadata": {{"name": "{name}"}}}}',
        )
        store.put(key.encode(), watch.encode(value))

    ressum_key = ResourceSummaryKey(partition_id=pid(0), kind="Pod", namespace="default", name="web-0", uid="uid-1")
    store.put(
        str(ressum_key).encode(),
        registry.get("ressum").encode(ResourceSummary(first_seen=NOW - HOUR, last_seen=NOW)),
    )
    event_key = EventCountKey(partition_id=pid(0), kind="Pod", namespace="default", name="web-0", uid="uid-1")
    store.put(
        str(event_key).encode(),
        registry.get("eventcount").encode(
            ResourceEventCounts(map_minute_to_counts={1705321800: EventCounts(map_reason_to_count={"Pulled": 2})})
        ),
    )
    activity_key = WatchActivityKey(partition_id=pid(0), kind="Pod", namespace="default", name="web-0", uid="uid-1")
    store.put(
        str(activity_key).encode(),
        registry.get("watchactivity").encode(WatchActivity(changed_at=[1705321800])),
    )

    for key in [b"!kv!head", b"!kv!head2", b"!kv!move1", b"!kv!discard", b"!kv!lease"]:
        store.put(key, b"x")
    return store


@pytest.fixture
def inspector(populated_store, registry, config):
    return KeyspaceInspector(populated_store, registry=registry, config=config)
