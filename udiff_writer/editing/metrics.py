"""
Write metrics — tracks write-tool outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".udiff_writer"
_METRICS_FILE = "write_metrics.jsonl"


def _metrics_path(project_root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, _METRICS_DIR, _METRICS_FILE)


def log_write_metric(data: dict, project_root: str | None = None) -> None:
    """Append a single write metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (path, status, mode, has_omission, error_kind...).
    project_root:
        Optional project root directory. Defaults to CWD.
    """
    path = _metrics_path(project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[WriteFile] Failed to write metrics: %s", exc)


def read_write_stats(
    last_n: int = 50,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Parameters
    ----------
    last_n:
        Number of most-recent entries to include.
    project_root:
        Optional project root directory.

    Returns
    -------
    dict
        total_writes, success_rate, patch_rate, omission_rate,
        rejection_rate (percentages) and error_kinds (counts).
    """
    path = _metrics_path(project_root)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[WriteFile] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_writes": 0,
            "success_rate": 0.0,
            "patch_rate": 0.0,
            "omission_rate": 0.0,
            "rejection_rate": 0.0,
            "error_kinds": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("status") == "success")
    patches = sum(1 for e in entries if e.get("mode") == "udiff")
    omissions = sum(1 for e in entries if e.get("has_omission", False))
    rejections = sum(
        1 for e in entries if e.get("status") in ("rejected", "feedback")
    )
    error_kinds = Counter(
        e.get("error_kind") or "other"
        for e in entries if e.get("status") == "error"
    )

    return {
        "total_writes": total,
        "success_rate": successes / total * 100,
        "patch_rate": patches / total * 100,
        "omission_rate": omissions / total * 100,
        "rejection_rate": rejections / total * 100,
        "error_kinds": dict(error_kinds.most_common()),
    }
