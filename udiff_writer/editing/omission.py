"""
Omission detector — heuristic scan for truncated or summarized output.

Models sometimes answer "write the whole file" with comments such as
``// rest of the code unchanged`` or a bare ``...``. The detector looks for
those markers in the candidate content and reports them. It never edits
anything and never raises; the verdict is advisory.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Iterable

logger = logging.getLogger(__name__)

_COMMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*//"),          # C-family line comment
    re.compile(r"^\s*#"),           # Python, Ruby, shell
    re.compile(r"^\s*/\*"),         # block comment opening
    re.compile(r"^\s*\*"),          # block comment continuation
    re.compile(r"^\s*\*/"),         # block comment closing
    re.compile(r"^\s*\{\s*/\*"),    # JSX comment opening
    re.compile(r"^\s*<!--"),        # HTML / XML
    re.compile(r"^\s*--"),          # SQL, Lua, Haskell
    re.compile(r"^\s*;"),           # Lisp, assembly, ini
    re.compile(r"^\s*%"),           # LaTeX, MATLAB, Erlang
    re.compile(r"^\s*///"),         # doc comments
)

_OMISSION_PHRASES: tuple[str, ...] = (
    "remain",
    "remains",
    "unchanged",
    "rest",
    "previous",
    "existing",
    "...",
    "placeholder implementation",
    "previous implementation",
    "rest of",
    "same as before",
    "as above",
    "similar to",
    "etc",
    "and so on",
)

_SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"/\*\s*\.\.\.\s*\*/", re.IGNORECASE),   # /* ... */
    re.compile(r"//\s*\.\.\.", re.IGNORECASE),          # // ...
    re.compile(r"#\s*\.\.\.", re.IGNORECASE),           # # ...
    re.compile(r"<!--\s*\.\.\.\s*-->", re.IGNORECASE),  # <!-- ... -->
    re.compile(r"\(\s*\.\.\.\s*\)", re.IGNORECASE),     # (...)
)

ELLIPSIS = "..."
SUSPICIOUS_KEYWORD = "suspicious pattern"


@dataclass(frozen=True)
class OmissionRules:
    """Vocabularies driving the detector.

    Kept as an immutable table so callers can tune it per language (or
    stub it in tests) without touching the detector.
    """
    comment_patterns: tuple[re.Pattern[str], ...] = _COMMENT_PATTERNS
    phrases: tuple[str, ...] = _OMISSION_PHRASES
    suspicious_patterns: tuple[re.Pattern[str], ...] = _SUSPICIOUS_PATTERNS

    def extended(self, extra_phrases: Iterable[str]) -> "OmissionRules":
        """Return a copy with *extra_phrases* appended to the phrase list."""
        extra = tuple(
            p.strip().lower() for p in extra_phrases
            if p.strip() and p.strip().lower() not in self.phrases
        )
        return replace(self, phrases=self.phrases + extra)


DEFAULT_RULES = OmissionRules()


@dataclass(frozen=True)
class Finding:
    """A single suspicious line in the candidate content."""
    line: str
    keyword: str
    line_number: int    # 1-indexed within the candidate


@dataclass(frozen=True)
class OmissionReport:
    has_omission: bool = False
    findings: tuple[Finding, ...] = field(default_factory=tuple)


class OmissionDetector:
    """Flag comment phrases and ellipses that suggest omitted code."""

    def __init__(self, rules: OmissionRules = DEFAULT_RULES) -> None:
        self._rules = rules

    @property
    def rules(self) -> OmissionRules:
        return self._rules

    def detect(self, original: str, candidate: str) -> OmissionReport:
        """Scan *candidate* for omission markers not already in *original*.

        Findings are ordered by pass (comment phrases, ellipses, suspicious
        patterns) and by line within each pass. A line may be reported by
        more than one pass, but at most once per pass.
        """
        original_lines = original.split("\n")
        candidate_lines = candidate.split("\n")

        findings: list[Finding] = []
        findings.extend(self._comment_pass(original_lines, candidate_lines))
        findings.extend(self._ellipsis_pass(original_lines, candidate_lines))
        findings.extend(self._suspicious_pass(candidate_lines))

        if findings:
            logger.debug(
                "[Omission] %d finding(s), first at line %d (%r)",
                len(findings), findings[0].line_number, findings[0].keyword,
            )
        return OmissionReport(has_omission=bool(findings), findings=tuple(findings))

    def _is_comment(self, line: str) -> bool:
        return any(p.search(line) for p in self._rules.comment_patterns)

    def _comment_pass(
        self,
        original_lines: list[str],
        candidate_lines: list[str],
    ) -> list[Finding]:
        known = {l.lower().strip() for l in original_lines}
        found: list[Finding] = []

        for idx, line in enumerate(candidate_lines):
            if not self._is_comment(line):
                continue
            normalized = line.lower().strip()
            if normalized in known:
                # Comment carried over from the original
                continue
            for phrase in self._rules.phrases:
                if phrase.lower() in normalized:
                    found.append(Finding(line=line, keyword=phrase, line_number=idx + 1))
                    break

        return found

    @staticmethod
    def _ellipsis_pass(
        original_lines: list[str],
        candidate_lines: list[str],
    ) -> list[Finding]:
        if any(ELLIPSIS in l for l in original_lines):
            return []
        return [
            Finding(line=line, keyword=ELLIPSIS, line_number=idx + 1)
            for idx, line in enumerate(candidate_lines)
            if ELLIPSIS in line
        ]

    def _suspicious_pass(self, candidate_lines: list[str]) -> list[Finding]:
        return [
            Finding(line=line, keyword=SUSPICIOUS_KEYWORD, line_number=idx + 1)
            for idx, line in enumerate(candidate_lines)
            if any(p.search(line) for p in self._rules.suspicious_patterns)
        ]


def detect_omission(
    original: str,
    candidate: str,
    rules: OmissionRules = DEFAULT_RULES,
) -> OmissionReport:
    """Module-level shortcut for ``OmissionDetector(rules).detect(...)``."""
    return OmissionDetector(rules).detect(original, candidate)
