"""kvscope - read-only key-space introspection for partitioned key-value stores."""

from kvscope.engine import KeyspaceInspector, SearchMode
from kvscope.version import __version__

__all__ = ["KeyspaceInspector", "SearchMode", "__version__"]
