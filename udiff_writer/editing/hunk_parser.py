"""
Hunk parser — splits unified-diff text into ordered hunks.

Only the hunk structure matters here: file headers (``---``/``+++``) are
optional and simply terminate the preceding hunk.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .errors import ParseError

logger = logging.getLogger(__name__)

_HUNK_MARKER = "@@"
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_FILE_HEADER_PREFIXES = ("---", "+++")


@dataclass
class Hunk:
    """One contiguous edit region of a diff."""
    original_start: int        # 0-indexed
    original_count: int
    new_start: int             # 0-indexed
    new_count: int
    lines: list[str] = field(default_factory=list)
    header_line: int = 0       # 1-indexed position of the header in the diff

    @property
    def additions(self) -> int:
        return sum(1 for l in self.lines if l.startswith("+"))

    @property
    def deletions(self) -> int:
        return sum(1 for l in self.lines if l.startswith("-"))


class HunkParser:
    """Parse unified-diff text into a list of :class:`Hunk`."""

    def parse(self, diff_text: str) -> list[Hunk]:
        """Parse *diff_text* into hunks, in the order they appear.

        Parameters
        ----------
        diff_text:
            Raw diff text. Lines before the first ``@@`` header are ignored.

        Returns
        -------
        list[Hunk]
            Hunks in encounter order (not sorted by start line).

        Raises
        ------
        ParseError
            If a line starting with ``@@`` is not a valid hunk header.
        """
        diff_lines = diff_text.split("\n")
        hunks: list[Hunk] = []
        i = 0

        while i < len(diff_lines):
            line = diff_lines[i]
            if not line.startswith(_HUNK_MARKER):
                i += 1
                continue

            hunk = self._parse_header(line, i + 1)
            i += 1
            while i < len(diff_lines) and not self._ends_hunk(diff_lines[i]):
                hunk.lines.append(diff_lines[i])
                i += 1
            hunks.append(hunk)

        logger.debug("[Patch] Parsed %d hunk(s)", len(hunks))
        return hunks

    @staticmethod
    def _parse_header(line: str, line_number: int) -> Hunk:
        match = _HUNK_HEADER.match(line)
        if match is None:
            raise ParseError(
                f"Invalid hunk header at line {line_number}",
                line_number=line_number,
                line=line,
            )

        orig_start, orig_count, new_start, new_count = match.groups()
        return Hunk(
            original_start=int(orig_start) - 1,
            original_count=int(orig_count) if orig_count is not None else 1,
            new_start=int(new_start) - 1,
            new_count=int(new_count) if new_count is not None else 1,
            header_line=line_number,
        )

    @staticmethod
    def _ends_hunk(line: str) -> bool:
        return line.startswith(_HUNK_MARKER) or line.startswith(_FILE_HEADER_PREFIXES)
