"""
Patch applier — reconciles parsed hunks against the original content.

Declared line numbers in model-generated diffs are routinely off by a few
lines, so hunks are located by content: before each hunk the applier scans
forward through the untouched original lines until it reaches the hunk's
anchor line, then replays the hunk body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .errors import DiffEditError, PatchError
from .hunk_parser import Hunk, HunkParser

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of :meth:`PatchApplier.try_apply`."""
    success: bool = False
    content: str = ""
    hunks_applied: int = 0
    error_kind: str = ""           # "parse" | "patch" | ""
    error: str = ""
    line_number: Optional[int] = None
    line: Optional[str] = None


class PatchApplier:
    """Apply unified-diff hunks to in-memory content.

    Parameters
    ----------
    dedupe_on_resync:
        While scanning for a hunk's anchor, drop an original line that is
        identical to the line most recently written to the output. This
        absorbs duplicated lines left behind by sloppy diffs, at the cost of
        collapsing legitimately repeated lines (blank lines, boilerplate)
        that sit between hunks.
    parser:
        Parser used when :meth:`apply` receives raw diff text.
    """

    def __init__(
        self,
        dedupe_on_resync: bool = True,
        parser: Optional[HunkParser] = None,
    ) -> None:
        self._dedupe = dedupe_on_resync
        self._parser = parser or HunkParser()

    def apply(self, original: str, diff: Union[str, Sequence[Hunk]]) -> str:
        """Apply *diff* to *original* and return the new content.

        Parameters
        ----------
        original:
            Full original file content.
        diff:
            Raw diff text, or hunks already produced by :class:`HunkParser`.

        Raises
        ------
        ParseError
            If *diff* is text with a malformed hunk header.
        PatchError
            If a hunk body is invalid or its anchor line cannot be found in
            the remaining original content.
        """
        hunks = self._parser.parse(diff) if isinstance(diff, str) else list(diff)
        original_lines = original.split("\n")
        output: list[str] = []
        cursor = 0

        for hunk in hunks:
            cursor = self._resync(original_lines, cursor, output, hunk)
            cursor = self._apply_body(original_lines, cursor, output, hunk)
            logger.debug("[Patch] Applied hunk at line %d (+%d/-%d)",
                         hunk.header_line, hunk.additions, hunk.deletions)

        # Tail: everything the hunks never reached
        output.extend(original_lines[cursor:])
        return "\n".join(output)

    def try_apply(self, original: str, diff: Union[str, Sequence[Hunk]]) -> ApplyResult:
        """Like :meth:`apply`, but report failures in an :class:`ApplyResult`."""
        result = ApplyResult()
        try:
            hunks = self._parser.parse(diff) if isinstance(diff, str) else list(diff)
            result.content = self.apply(original, hunks)
        except DiffEditError as exc:
            logger.warning("[Patch] %s error: %s", exc.kind, exc.message)
            result.error_kind = exc.kind
            result.error = exc.message
            result.line_number = exc.line_number
            result.line = exc.line
            return result

        result.success = True
        result.hunks_applied = len(hunks)
        return result

    # ------------------------------------------------------------------
    # Resynchronization
    # ------------------------------------------------------------------

    def _resync(
        self,
        original_lines: list[str],
        cursor: int,
        output: list[str],
        hunk: Hunk,
    ) -> int:
        """Copy untouched original lines until the cursor sits on the anchor."""
        if not hunk.lines:
            raise PatchError(
                f"Empty hunk at line {hunk.header_line}",
                line_number=hunk.header_line,
                line="",
            )

        anchor = self._anchor_of(hunk)
        if anchor is None:
            # Additions only: nothing to match, fall back to the declared
            # start. A zero count means "insert after" that line.
            declared = hunk.original_start + (1 if hunk.original_count == 0 else 0)
            target = max(cursor, min(declared, len(original_lines)))
            while cursor < target:
                self._copy_line(original_lines[cursor], output)
                cursor += 1
            return cursor

        # Bounded by the remaining original content
        while cursor < len(original_lines) and original_lines[cursor] != anchor:
            self._copy_line(original_lines[cursor], output)
            cursor += 1

        if cursor >= len(original_lines):
            raise PatchError(
                f"Resync target not found for hunk at line {hunk.header_line}: "
                f"{anchor!r}",
                line_number=hunk.header_line,
                line=anchor,
            )

        if cursor != hunk.original_start:
            logger.debug(
                "[Patch] Hunk at line %d resynced to original line %d "
                "(declared %d)",
                hunk.header_line, cursor + 1, hunk.original_start + 1,
            )
        return cursor

    def _copy_line(self, line: str, output: list[str]) -> None:
        if self._dedupe and output and output[-1] == line:
            logger.debug("[Patch] Dropped duplicate line during resync: %r", line)
            return
        output.append(line)

    @staticmethod
    def _anchor_of(hunk: Hunk) -> Optional[str]:
        """Return the original line the hunk must start at, or None.

        The anchor is the first body line that is not an addition, with its
        prefix stripped. None means the hunk only adds lines.
        """
        last = len(hunk.lines) - 1
        for idx, line in enumerate(hunk.lines):
            if line.startswith("+"):
                continue
            if line.startswith(("-", " ")):
                return line[1:]
            if line == "":
                return None if idx == last else ""
            raise PatchError(
                f"Invalid line in hunk: {line!r}",
                line_number=hunk.header_line + 1 + idx,
                line=line,
            )
        return None

    # ------------------------------------------------------------------
    # Hunk body
    # ------------------------------------------------------------------

    def _apply_body(
        self,
        original_lines: list[str],
        cursor: int,
        output: list[str],
        hunk: Hunk,
    ) -> int:
        last = len(hunk.lines) - 1

        for idx, line in enumerate(hunk.lines):
            line_number = hunk.header_line + 1 + idx

            if line.startswith("+"):
                output.append(line[1:])
            elif line.startswith("-"):
                self._consume(original_lines, cursor, line[1:], line_number)
                cursor += 1
            elif line.startswith(" "):
                self._consume(original_lines, cursor, line[1:], line_number)
                output.append(line[1:])
                cursor += 1
            elif line == "":
                if idx == last:
                    # Trailing padding from a final newline
                    continue
                self._consume(original_lines, cursor, "", line_number)
                output.append("")
                cursor += 1
            else:
                raise PatchError(
                    f"Invalid line in hunk: {line!r}",
                    line_number=line_number,
                    line=line,
                )

        return cursor

    @staticmethod
    def _consume(
        original_lines: list[str],
        cursor: int,
        expected: str,
        line_number: int,
    ) -> None:
        """Check that a context/deletion line has an original line to consume."""
        if cursor >= len(original_lines):
            raise PatchError(
                f"Hunk extends past end of original at diff line {line_number}",
                line_number=line_number,
                line=expected,
            )
        if original_lines[cursor] != expected:
            logger.debug(
                "[Patch] Diff line %d does not match original line %d: "
                "%r != %r",
                line_number, cursor + 1, expected, original_lines[cursor],
            )
