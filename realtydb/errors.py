"""Exception types raised by realtydb.

Driver errors (asyncpg, sqlite3) are never wrapped; they reach the caller
unchanged. The classes here cover what realtydb itself detects.
"""


class RealtyDBError(Exception):
    """Base class for errors raised by realtydb."""


class ConfigurationError(RealtyDBError):
    """A required setting is missing or invalid (connection string, file path)."""


class UnsupportedDatabaseURL(ConfigurationError):
    """The connection URL names a backend realtydb cannot drive."""

    def __init__(self, url: str):
        super().__init__(f"Unsupported database URL scheme: {url.split(':', 1)[0]!r}")
        self.url = url


class ParameterCountError(RealtyDBError):
    """Number of bound parameters does not match the placeholders in a statement."""

    def __init__(self, expected: int, received: int, sql: str = ""):
        super().__init__(
            f"Statement expects {expected} parameter(s) but {received} were supplied"
        )
        self.expected = expected
        self.received = received
        self.sql = sql
