"""Key listing and search across one or more tables.

Two mutually exclusive strategies:

- ``regex``: full scan of each selected table's prefix, every stored version,
  matching keys against a regular expression. Reports how many entries were
  scanned and the estimated size of the matches.
- ``partition``: bounded lookup through each table's time partitions inside a
  lookback window, filtering by substring. Cheaper, but it does not see
  versions or sizes, so scanned and matched counts are the same number and
  the matched size is unknown.
"""

import re
from datetime import datetime
from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field, computed_field

from kvscope.engine.scanner import ScanAction, scan
from kvscope.errors import InvalidPatternError, StoreError
from kvscope.store.base import Snapshot, StoreItem
from kvscope.tables.registry import TableRegistry, TableScope

DEFAULT_MAX_ROWS = 1000
DEFAULT_LOOKBACK_HOURS = 336


class SearchMode(str, Enum):
    """Key search strategy."""

    REGEX = "regex"
    PARTITION = "partition"


class KeyListResult(BaseModel):
    """Keys found by a search plus scan accounting."""

    mode: SearchMode = Field(description="Strategy that produced the result")
    keys: list[str] = Field(default_factory=list, description="Matched keys in scan order")
    total_scanned: int = Field(default=0, description="Entries looked at")
    total_matched_size: int = Field(default=0, description="Estimated bytes of matched entries")
    matched_count: int = Field(default=0, description="Number of matched entries")
    max_rows: int = Field(default=DEFAULT_MAX_ROWS, description="Row cap in effect")
    sizes_known: bool = Field(
        default=True,
        description="False when the strategy cannot see entry sizes (partition mode)",
    )

    @computed_field
    @property
    def capped(self) -> bool:
        """True when the row cap cut the search short."""
        return self.max_rows > 0 and self.matched_count >= self.max_rows


def compile_pattern(pattern: str | re.Pattern | None) -> re.Pattern:
    """Compile a key-match expression.

    Raises:
        InvalidPatternError: If the expression does not compile
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern or "")
    except re.error as e:
        raise InvalidPatternError(f"Invalid regex {pattern!r}: {e}", pattern=pattern) from e


def list_keys(
    snapshot: Snapshot,
    registry: TableRegistry,
    table: str,
    *,
    mode: SearchMode = SearchMode.PARTITION,
    max_rows: int = DEFAULT_MAX_ROWS,
    pattern: str | re.Pattern | None = None,
    lookback_hours: int = DEFAULT_LOOKBACK_HOURS,
    key_search: str = "",
    now: datetime | None = None,
) -> KeyListResult:
    """List keys of the selected tables.

    Args:
        snapshot: Read view to search
        registry: Table registry
        table: Table selector (table name, "all", "internal" or "")
        mode: Search strategy
        max_rows: Row cap across all selected tables
        pattern: Regular expression (regex mode only), unanchored
        lookback_hours: Window for partition mode
        key_search: Substring filter for partition mode
        now: Window end for partition mode (defaults to current UTC time)

    Returns:
        KeyListResult

    Raises:
        InvalidPatternError: Regex mode with a pattern that does not compile,
            raised before anything is scanned
        UnknownTableError: If the selector names no table
        StoreError: If the store fails, naming the table for partition mode
    """
    if mode is SearchMode.REGEX:
        regex = compile_pattern(pattern)
        scopes = registry.resolve(table)
        return _regex_search(snapshot, scopes, regex, max_rows)

    scopes = registry.resolve(table)
    return _partition_search(snapshot, scopes, max_rows, lookback_hours, key_search, now)


def _regex_search(
    snapshot: Snapshot, scopes: list[TableScope], regex: re.Pattern, max_rows: int
) -> KeyListResult:
    result = KeyListResult(mode=SearchMode.REGEX, max_rows=max_rows)
    if max_rows <= 0:
        return result

    for scope in scopes:
        if result.matched_count >= max_rows:
            break
        match_prefix = scope.match_prefix.encode()

        def visit(item: StoreItem) -> ScanAction:
            result.total_scanned += 1
            if not item.key.startswith(match_prefix):
                return ScanAction.CONTINUE
            key = item.key.decode("utf-8", errors="replace")
            if not regex.search(key):
                return ScanAction.CONTINUE
            result.keys.append(key)
            result.matched_count += 1
            result.total_matched_size += item.estimated_size
            if result.matched_count >= max_rows:
                logger.info(f"Number of rows: {result.matched_count} has reached max rows: {max_rows}")
                return ScanAction.STOP
            return ScanAction.CONTINUE

        visited = scan(snapshot, scope.scan_prefix.encode(), visit)
        logger.debug(f"Scanned {visited} entries of table {scope.name}")

    return result


def _partition_search(
    snapshot: Snapshot,
    scopes: list[TableScope],
    max_rows: int,
    lookback_hours: int,
    key_search: str,
    now: datetime | None,
) -> KeyListResult:
    keys: list[str] = []
    if max_rows > 0 and lookback_hours > 0:
        for scope in scopes:
            if scope.table is None:
                logger.debug(f"Table {scope.name} has no partitions, skipping")
                continue
            remaining = max_rows - len(keys)
            if remaining <= 0:
                break
            try:
                keys.extend(
                    scope.table.get_all_keys_for_given_partitions(
                        snapshot, remaining, lookback_hours, key_search, now
                    )
                )
            except StoreError as e:
                raise StoreError(f"Partitioned lookup failed for table {scope.name}: {e}") from e

    # No scan happens here, so scanned and matched are the same count
    return KeyListResult(
        mode=SearchMode.PARTITION,
        keys=keys,
        total_scanned=len(keys),
        matched_count=len(keys),
        total_matched_size=0,
        max_rows=max_rows,
        sizes_known=False,
    )
