"""
Aggregate job: run one dashboard aggregation and emit the dataset as JSON.

Writes to OUTPUT_PATH when set, otherwise to stdout. Logs go to stderr so the
dataset stays machine-readable.
"""

import logging
import os
import sys
import time
from pathlib import Path

from gpd_backend.services.dashboard_service import DashboardAggregator

logger = logging.getLogger(__name__)


async def run_aggregate_job() -> dict:
    """
    Executes a single aggregation and writes the result.

    Returns stats dict with account, repository and pull request counts.
    """
    job_start = time.monotonic()

    data = await DashboardAggregator().run()
    payload = data.model_dump_json(by_alias=True, indent=2)

    output_path = os.getenv("OUTPUT_PATH")
    if output_path:
        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"Dataset written to {target}", extra={"output_path": str(target)})
    else:
        sys.stdout.write(payload + "\n")
        sys.stdout.flush()

    job_elapsed = time.monotonic() - job_start
    accounts_with_repos = {account for repo in data.repositories for account in repo.accounts}

    return {
        "accounts_with_repos": len(accounts_with_repos),
        "repositories": len(data.repositories),
        "pull_requests": len(data.pull_requests),
        "warnings": len(data.warnings),
        "duration_s": round(job_elapsed, 1),
    }
