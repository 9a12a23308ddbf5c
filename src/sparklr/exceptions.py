"""Errors raised by the SDK.

Transport faults (``httpx.HTTPError`` and JSON decode errors) are not
wrapped; they reach the caller unchanged.
"""


class SparklrError(Exception):
    """Base class for SDK errors."""


class NoDataFoundError(SparklrError):
    """A read request came back with a non-success status or the wrong entity."""

    def __init__(self, path: str, status_code: int, reason: str | None = None):
        super().__init__(
            f"No data found for '{path}' ({reason or f'HTTP {status_code}'})"
        )
        self.path = path
        self.status_code = status_code


class ValidationError(SparklrError, ValueError):
    """An argument was rejected before any request was made."""

    def __init__(self, message: str, length: int | None = None):
        super().__init__(message)
        self.length = length
