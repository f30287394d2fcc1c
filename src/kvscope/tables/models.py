"""Value models stored in the domain tables.

Values are stored as JSON (orjson) and validated on read.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class WatchType(str, Enum):
    """Kind of change a watch event reports."""

    ADD = "ADD"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class KubeWatchResult(BaseModel):
    """One raw watch event as received from the API server."""

    timestamp: datetime = Field(description="Time the event was observed")
    kind: str = Field(description="Resource kind")
    watch_type: WatchType = Field(description="Change type")
    payload: str = Field(default="", description="Serialized resource (usually JSON)")


class ResourceSummary(BaseModel):
    """Lifetime summary of a resource within one partition."""

    first_seen: datetime = Field(description="First event seen in the partition")
    last_seen: datetime = Field(description="Last event seen in the partition")
    create_time: datetime | None = Field(default=None, description="Resource creation time")
    deleted_at_end: bool = Field(default=False, description="Deleted by the end of the partition")
    relationships: list[str] = Field(default_factory=list, description="Related resource keys")


class EventCounts(BaseModel):
    """Event reasons and how often each occurred."""

    map_reason_to_count: dict[str, int] = Field(default_factory=dict)


class ResourceEventCounts(BaseModel):
    """Event counts for a resource bucketed by minute (Unix seconds)."""

    map_minute_to_counts: dict[int, EventCounts] = Field(default_factory=dict)


class WatchActivity(BaseModel):
    """Times (Unix seconds) a resource was watched with and without changes."""

    no_change_at: list[int] = Field(default_factory=list)
    changed_at: list[int] = Field(default_factory=list)
