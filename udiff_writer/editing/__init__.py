"""Diff engine and omission heuristics for model-written file changes."""

from .errors import DiffEditError, ParseError, PatchError
from .hunk_parser import HunkParser, Hunk
from .patch_applier import PatchApplier, ApplyResult
from .omission import (
    OmissionDetector, OmissionRules, OmissionReport, Finding,
    DEFAULT_RULES, detect_omission,
)
from .metrics import log_write_metric, read_write_stats

__all__ = [
    "DiffEditError", "ParseError", "PatchError",
    "HunkParser", "Hunk",
    "PatchApplier", "ApplyResult",
    "OmissionDetector", "OmissionRules", "OmissionReport", "Finding",
    "DEFAULT_RULES", "detect_omission",
    "log_write_metric", "read_write_stats",
]
