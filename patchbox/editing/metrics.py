"""
Edit metrics - journals engine requests in a JSONL log file and computes
rolling statistics over it.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".patchbox"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, _METRICS_DIR, _METRICS_FILE)


def log_edit_metric(data: dict, project_root: str | None = None) -> None:
    """Append a single request entry to the JSONL log.

    Parameters
    ----------
    data:
        Fields to log (op, path, ok, error_kind, ...).
    project_root:
        Directory holding the ``.patchbox`` folder. Defaults to CWD.
    """
    path = _metrics_path(project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[PatchEngine] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Parameters
    ----------
    last_n:
        Number of most-recent entries to include.
    project_root:
        Directory holding the ``.patchbox`` folder.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate`` (percent), ``ops`` (percent per
        operation) and ``error_kinds`` (count per failure kind).
    """
    path = _metrics_path(project_root)

    entries: list[dict] = []
    if os.path.isfile(path):
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "ops": {},
            "error_kinds": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("ok", False))
    ops = Counter(e.get("op") or "unknown" for e in entries)
    error_kinds = Counter(
        e["error_kind"] for e in entries
        if not e.get("ok", False) and e.get("error_kind")
    )

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "ops": {op: count / total * 100 for op, count in ops.most_common()},
        "error_kinds": dict(error_kinds.most_common()),
    }
