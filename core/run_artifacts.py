"""Output artifacts of a scan: the schema dump and the run report."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def write_schema_file(payload: dict[str, Any], output_file: str) -> str:
    """Write the extracted schemas as JSON and return the path."""
    _ensure_parent_dir(output_file)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return output_file


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/scan_reports",
) -> str:
    """Write a JSON run report named after the run and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"scan_{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
