"""Key builders shared by the tests."""

from datetime import datetime, timedelta, timezone

from kvscope.tables.keys import WatchTableKey, partition_id_for

HOUR = timedelta(hours=1)
NOW = datetime(2024, 1, 15, 12, 30, tzinfo=timezone.utc)


def pid(hours_ago: int) -> str:
    """Partition id of the partition containing NOW - hours_ago."""
    return partition_id_for(NOW - timedelta(hours=hours_ago), HOUR)


def watch_key(
    hours_ago: int, name: str, namespace: str = "default", kind: str = "Pod", offset_ns: int = 0
) -> str:
    """Watch key for an event observed hours_ago before NOW."""
    ts = int((NOW - timedelta(hours=hours_ago)).timestamp()) * 1_000_000_000 + offset_ns
    return str(
        WatchTableKey(partition_id=pid(hours_ago), kind=kind, namespace=namespace, name=name, timestamp=ts)
    )
