"""Single-key resolver: find a key's table, then fetch and decode its value."""

from typing import Any

import orjson
from pydantic import BaseModel, Field

from kvscope.store.base import Snapshot
from kvscope.tables.models import KubeWatchResult
from kvscope.tables.registry import TableRegistry

PAYLOAD_FIELD = "$.Payload"


class KeyView(BaseModel):
    """Decoded value stored at one key."""

    key: str = Field(description="Raw key")
    table: str = Field(description="Owning table")
    value: dict[str, Any] = Field(description="Decoded value, JSON ready")
    extra_name: str | None = Field(default=None, description="Label of an extra rendered field")
    extra_value: str | None = Field(default=None, description="Extra rendered field")


def pretty_json(text: str) -> str:
    """Indent text as JSON, or return it unchanged if it is not JSON."""
    try:
        return orjson.dumps(orjson.loads(text), option=orjson.OPT_INDENT_2).decode()
    except orjson.JSONDecodeError:
        return text


def view_key(snapshot: Snapshot, registry: TableRegistry, raw_key: str) -> KeyView:
    """Resolve raw_key to its table and decoded value.

    Validators are probed before the store is touched, so an invalid key
    never costs a read.

    Raises:
        InvalidKeyError: If no table's validator accepts the key
        KeyNotFoundError: If the key validates but holds no live value
        DecodeError: If the stored value does not parse
    """
    table = registry.owning_table(raw_key)
    value = table.get(snapshot, raw_key)

    view = KeyView(key=raw_key, table=table.name, value=value.model_dump(mode="json"))
    if isinstance(value, KubeWatchResult):
        view.extra_name = PAYLOAD_FIELD
        view.extra_value = pretty_json(value.payload)
    return view
