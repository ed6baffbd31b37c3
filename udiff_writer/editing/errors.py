"""
Error kinds raised by the diff engine.
"""

from __future__ import annotations

from typing import Optional


class DiffEditError(Exception):
    """Base class for diff parsing and application failures.

    Carries the 1-based line number inside the diff text (when known) and
    the raw offending line, so callers can report them verbatim.
    """

    kind = "diff"

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.line = line


class ParseError(DiffEditError):
    """Raised when a hunk header cannot be decoded."""

    kind = "parse"


class PatchError(DiffEditError):
    """Raised when a hunk body is invalid or its anchor cannot be found."""

    kind = "patch"
