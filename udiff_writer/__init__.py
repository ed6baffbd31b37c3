"""
udiff_writer — apply model-written diffs and flag truncated output.

Public API for library usage::

    from udiff_writer import PatchApplier, OmissionDetector

    new_content = PatchApplier().apply(original, diff_text)
    report = OmissionDetector().detect(original, new_content)
"""

from .editing import (
    HunkParser, Hunk, PatchApplier, ApplyResult,
    OmissionDetector, OmissionRules, OmissionReport, Finding,
    ParseError, PatchError,
)
from .writer import WriteFileTool, WriteRequest, ToolResponse

__version__ = "0.1.0"

__all__ = [
    "HunkParser", "Hunk", "PatchApplier", "ApplyResult",
    "OmissionDetector", "OmissionRules", "OmissionReport", "Finding",
    "ParseError", "PatchError",
    "WriteFileTool", "WriteRequest", "ToolResponse",
]
