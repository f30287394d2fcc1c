"""Generic domain table: key schema, value decoding and partitioned key lookup."""

from datetime import datetime, timedelta, timezone

import orjson
from loguru import logger
from pydantic import BaseModel, ValidationError

from kvscope.errors import DecodeError
from kvscope.store.base import Snapshot
from kvscope.tables.keys import TableKey


class Table:
    """One logical partition of the key-space, identified by its key prefix."""

    def __init__(
        self,
        key_cls: type[TableKey],
        value_model: type[BaseModel],
        partition_duration: timedelta = timedelta(hours=1),
    ):
        """Initialize table.

        Args:
            key_cls: Key class providing the schema validator
            value_model: Pydantic model values decode into
            partition_duration: Width of a time partition
        """
        self.key_cls = key_cls
        self.value_model = value_model
        self.partition_duration = partition_duration

    @property
    def name(self) -> str:
        return self.key_cls.table_name

    @property
    def prefix(self) -> str:
        return self.key_cls.prefix()

    def __repr__(self) -> str:
        return f"Table({self.name!r})"

    def validate_key(self, raw: str) -> None:
        self.key_cls.validate_key(raw)

    def encode(self, value: BaseModel) -> bytes:
        """Serialize a value for storage."""
        return orjson.dumps(value.model_dump(mode="json"))

    def decode(self, key: str, raw: bytes) -> BaseModel:
        """Parse a stored value into the table's value model.

        Raises:
            DecodeError: If raw is not valid JSON for the value model
        """
        try:
            return self.value_model.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise DecodeError(f"Failed to decode {self.name} value for key {key}: {e}", key=key) from e

    def get(self, snapshot: Snapshot, key: str) -> BaseModel:
        """Fetch and decode the value stored at key.

        Raises:
            InvalidKeyError: If key is not a key of this table
            KeyNotFoundError: If no live value is stored
            DecodeError: If the stored value does not parse
        """
        self.validate_key(key)
        return self.decode(key, snapshot.get(key.encode()))

    def partitions_in_window(self, lookback_hours: int, now: datetime | None = None) -> list[str]:
        """Partition ids overlapping [now - lookback, now], oldest first.

        The partition containing the window start is included, so a lookback
        shorter than the partition width still covers the current partition.
        """
        if lookback_hours <= 0:
            return []
        now = now or datetime.now(timezone.utc)
        width = int(self.partition_duration.total_seconds())
        window_start = int((now - timedelta(hours=lookback_hours)).timestamp())
        first = window_start // width * width
        last = int(now.timestamp()) // width * width
        return [f"{start:010d}" for start in range(first, last + 1, width)]

    def get_all_keys_for_given_partitions(
        self,
        snapshot: Snapshot,
        max_rows: int,
        lookback_hours: int,
        key_search: str = "",
        now: datetime | None = None,
    ) -> list[str]:
        """List keys from recent partitions without scanning the whole table.

        Only the partitions inside the lookback window are visited, and
        within them only the newest live version of each key.

        Args:
            snapshot: Read view to search
            max_rows: Maximum number of keys to return
            lookback_hours: Window size ending at now
            key_search: Substring a key must contain (empty matches all)
            now: Window end (defaults to current UTC time)

        Returns:
            Matching keys, oldest partition first, in key order within a partition
        """
        keys: list[str] = []
        if max_rows <= 0:
            return keys

        partitions = self.partitions_in_window(lookback_hours, now)
        logger.debug(f"Searching {len(partitions)} partitions of table {self.name}")
        for partition_id in partitions:
            prefix = self.key_cls.partition_prefix(partition_id).encode()
            for item in snapshot.iterate(prefix):
                raw = item.key.decode("utf-8", errors="replace")
                if key_search and key_search not in raw:
                    continue
                if not self.key_cls.is_valid(raw):
                    continue
                keys.append(raw)
                if len(keys) >= max_rows:
                    return keys
        return keys
