"""Error types raised by the inspection engine.

Every error is returned to the immediate caller. The presentation layers map
them onto HTTP status codes or CLI exit codes.

Example:
    >>> from kvscope.errors import InvalidKeyError
    >>> try:
    ...     inspector.view_key("/nope")
    ... except InvalidKeyError as e:
    ...     print(f"Invalid key: {e.key}")
"""


class KeyspaceError(Exception):
    """Base class for all inspection errors."""


class InvalidKeyError(KeyspaceError):
    """Raised when a raw key matches no table's key schema."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class InvalidPatternError(KeyspaceError):
    """Raised when a key-match regular expression does not compile."""

    def __init__(self, message: str, pattern: str | None = None):
        super().__init__(message)
        self.pattern = pattern


class UnknownTableError(KeyspaceError):
    """Raised when a table selector names no registered table."""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class DecodeError(KeyspaceError):
    """Raised when a stored value does not parse into its table's value model."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class CategorizationError(KeyspaceError):
    """Raised when a domain key has no recognized structural shape.

    Used by the histogram, where one corrupt key aborts the whole scan.
    """

    def __init__(self, message: str, key: bytes | None = None):
        super().__init__(message)
        self.key = key


class StoreError(KeyspaceError):
    """Raised when the underlying store fails to open, iterate or read."""


class KeyNotFoundError(StoreError):
    """Raised when a point lookup finds no live value for a key."""

    def __init__(self, message: str, key: bytes | None = None):
        super().__init__(message)
        self.key = key
