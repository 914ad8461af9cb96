"""Run report aggregation."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from npi_scraper.common.fs import write_json
from npi_scraper.pipeline.crawl import CrawlResult


def summarize(result: CrawlResult) -> dict:
    error_codes = Counter(error.error_code for error in result.errors)
    succeeded = len(result.rows)
    failed = len(result.errors)

    status = "success"
    if failed and succeeded == 0:
        status = "error"
    elif failed:
        status = "partial"

    return {
        "status": status,
        "totals": {
            "requested": result.requested,
            "succeeded": succeeded,
            "failed": failed,
        },
        "error_codes": dict(error_codes),
    }


def write_run_summary(
    data_dir: Path,
    run_id: str,
    result: CrawlResult,
    *,
    command: str = "crawl",
    failed_artifacts: list[str] | None = None,
) -> Path:
    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {"run_id": run_id, "command": command}
    payload.update(summarize(result))
    payload["failed_artifacts"] = list(failed_artifacts or [])
    write_json(summary_path, payload)
    return summary_path
