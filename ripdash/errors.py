"""
Load-time error types. Parse-level problems never raise; they degrade to
sentinel values in the normalizer.
"""
from __future__ import annotations


class RipError(Exception):
    """Base class for load failures surfaced to the caller."""


class FetchError(RipError):
    """Network failure or non-success response while fetching a sheet."""

    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            msg = f"Could not load TSV ({status})"
        else:
            msg = f"Could not load TSV ({reason or 'network error'})"
        super().__init__(msg)


class SchemaError(RipError):
    """The registration sheet is missing required headers."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Registration TSV does not match. Missing columns: {', '.join(self.missing)}")
