"""Derive the histogram grouping category of a domain key."""

from kvscope.errors import CategorizationError, InvalidKeyError
from kvscope.tables.keys import KEY_PARTS, Category
from kvscope.tables.registry import TableRegistry


def categorize(raw_key: bytes, registry: TableRegistry) -> Category:
    """Category of a domain key: its table and partition.

    The owning table is picked by the key's table segment, and the key must
    pass that table's validator. Kind, namespace, name and the trailing
    timestamp or uid are dropped, so keys written by the same table into the
    same partition share a category.

    Raises:
        CategorizationError: If the key is not UTF-8, names no known table or
            fails its table's schema
    """
    try:
        key = raw_key.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CategorizationError(f"Key is not valid UTF-8: {raw_key.hex()}", key=raw_key) from e

    parts = key.split("/", 2)
    if len(parts) < 2 or parts[0] != "":
        raise CategorizationError(f"Key should have {KEY_PARTS - 1} parts: {key}", key=raw_key)

    table = registry.find(parts[1])
    if table is None:
        raise CategorizationError(f"Unknown table {parts[1]!r} in key: {key}", key=raw_key)

    try:
        return table.key_cls.parse(key).category()
    except InvalidKeyError as e:
        raise CategorizationError(str(e), key=raw_key) from e
