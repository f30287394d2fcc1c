"""Typed keys and key-schema validation for the four domain tables.

Every domain key has seven ``/``-separated parts (the first empty)::

    /<table>/<partitionId>/<kind>/<namespace>/<name>/<timestamp|uid>

The partition id is the zero-padded Unix second at which the key's time
partition starts. Namespace is empty for cluster-scoped objects.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import ClassVar, NamedTuple

from pydantic import BaseModel, ConfigDict

from kvscope.errors import InvalidKeyError

KEY_PARTS = 7
_PARTITION_RE = re.compile(r"[0-9]+")


class Category(NamedTuple):
    """Structural grouping of a domain key: its table and time partition."""

    table: str
    partition_id: str

    def __str__(self) -> str:
        return f"/{self.table}/{self.partition_id}"


def partition_id_for(ts: datetime, duration: timedelta) -> str:
    """Partition id containing ts.

    Example:
        >>> partition_id_for(datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc), timedelta(hours=1))
        '1704103200'
    """
    width = int(duration.total_seconds())
    unix = int(ts.timestamp())
    return f"{unix - unix % width:010d}"


def partition_start(partition_id: str) -> datetime:
    """Start of a partition as an aware UTC datetime."""
    return datetime.fromtimestamp(int(partition_id), tz=timezone.utc)


class TableKey(BaseModel):
    """Base for domain table keys."""

    model_config = ConfigDict(frozen=True)

    table_name: ClassVar[str]

    partition_id: str
    kind: str
    namespace: str
    name: str

    @classmethod
    def prefix(cls) -> str:
        return f"/{cls.table_name}/"

    @classmethod
    def partition_prefix(cls, partition_id: str) -> str:
        return f"/{cls.table_name}/{partition_id}/"

    @classmethod
    def _split(cls, raw: str) -> list[str]:
        parts = raw.split("/")
        if len(parts) != KEY_PARTS:
            raise InvalidKeyError(f"Key should have {KEY_PARTS - 1} parts: {raw}", key=raw)
        if parts[0] != "":
            raise InvalidKeyError(f"Key should start with /: {raw}", key=raw)
        if parts[1] != cls.table_name:
            raise InvalidKeyError(
                f"Invalid table name {parts[1]!r} for {cls.table_name} key: {raw}", key=raw
            )
        if not _PARTITION_RE.fullmatch(parts[2]):
            raise InvalidKeyError(f"Invalid partition id {parts[2]!r} in key: {raw}", key=raw)
        return parts

    @classmethod
    def _from_parts(cls, parts: list[str]) -> "TableKey":
        raise NotImplementedError

    @classmethod
    def parse(cls, raw: str) -> "TableKey":
        """Parse a raw key string.

        Raises:
            InvalidKeyError: If raw is not a key of this table
        """
        return cls._from_parts(cls._split(raw))

    @classmethod
    def validate_key(cls, raw: str) -> None:
        """Check raw against this table's key schema without touching the store.

        Raises:
            InvalidKeyError: If raw is not a key of this table
        """
        cls.parse(raw)

    @classmethod
    def is_valid(cls, raw: str) -> bool:
        try:
            cls.validate_key(raw)
        except InvalidKeyError:
            return False
        return True

    def last_field(self) -> str:
        raise NotImplementedError

    def category(self) -> Category:
        """Grouping category: kind, namespace, name and the trailing field are dropped."""
        return Category(self.table_name, self.partition_id)

    def partition_start(self) -> datetime:
        return partition_start(self.partition_id)

    def __str__(self) -> str:
        return (
            f"/{self.table_name}/{self.partition_id}/{self.kind}"
            f"/{self.namespace}/{self.name}/{self.last_field()}"
        )


class WatchTableKey(TableKey):
    """Key of a raw watch event; the trailing field is the event time in Unix ns."""

    table_name: ClassVar[str] = "watch"

    timestamp: int

    @classmethod
    def _from_parts(cls, parts: list[str]) -> "WatchTableKey":
        try:
            timestamp = int(parts[6])
        except ValueError:
            raise InvalidKeyError(
                f"Invalid timestamp {parts[6]!r} in key: {'/'.join(parts)}", key="/".join(parts)
            )
        return cls(
            partition_id=parts[2], kind=parts[3], namespace=parts[4], name=parts[5], timestamp=timestamp
        )

    def last_field(self) -> str:
        return str(self.timestamp)


class _UidKey(TableKey):
    uid: str

    @classmethod
    def _from_parts(cls, parts: list[str]) -> "_UidKey":
        if not parts[6]:
            raise InvalidKeyError(f"Missing uid in key: {'/'.join(parts)}", key="/".join(parts))
        return cls(partition_id=parts[2], kind=parts[3], namespace=parts[4], name=parts[5], uid=parts[6])

    def last_field(self) -> str:
        return self.uid


class ResourceSummaryKey(_UidKey):
    """Key of a per-partition resource summary."""

    table_name: ClassVar[str] = "ressum"


class EventCountKey(_UidKey):
    """Key of per-minute event counts for a resource."""

    table_name: ClassVar[str] = "eventcount"


class WatchActivityKey(_UidKey):
    """Key of a resource's watch activity record."""

    table_name: ClassVar[str] = "watchactivity"
