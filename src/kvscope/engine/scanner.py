"""Key scanner: ordered traversal of every stored version under a prefix."""

from collections.abc import Callable
from enum import Enum

from kvscope.store.base import Snapshot, StoreItem


class ScanAction(str, Enum):
    """Visitor verdict after each item."""

    CONTINUE = "continue"
    STOP = "stop"


Visitor = Callable[[StoreItem], ScanAction]


def scan(snapshot: Snapshot, prefix: bytes, visit: Visitor, all_versions: bool = True) -> int:
    """Feed every item under prefix to visit until it asks to stop.

    The scanner does not look at key contents; classification is up to the
    visitor.

    Args:
        snapshot: Read view to traverse
        prefix: Key prefix to restrict the traversal to (empty = whole key-space)
        visit: Called once per stored version, in key order
        all_versions: Include every retained version, deleted or expired ones too

    Returns:
        Number of items visited
    """
    visited = 0
    for item in snapshot.iterate(prefix, all_versions=all_versions):
        visited += 1
        if visit(item) is ScanAction.STOP:
            break
    return visited
