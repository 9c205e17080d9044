"""Run artifact helpers for operational reporting."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

DEFAULT_REPORT_DIR = "output/run_reports"


def run_status(exit_code: int) -> str:
    """Map a process exit code to the report's ``status`` field."""
    return {0: "success", 1: "partial_success"}.get(exit_code, "failed")


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = DEFAULT_REPORT_DIR,
) -> str:
    """Write ``docgen-<run_id>.json`` and return its path.

    Reports live outside the documentation tree so regenerated docs stay
    byte-identical between runs. The file is written to a temporary name
    and renamed, so readers never see a partial report.
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    payload = {
        "run_id": run_id,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        **report,
    }
    path = directory / f"docgen-{run_id}.json"
    partial = path.with_name(path.name + ".partial")
    partial.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    os.replace(partial, path)
    return str(path)
