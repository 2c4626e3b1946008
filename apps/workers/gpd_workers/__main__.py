"""
Single entrypoint for PR dashboard jobs.

Usage:
    JOB_TYPE=aggregate python -m gpd_workers   # One aggregation -> JSON on stdout or OUTPUT_PATH
    JOB_TYPE=serve python -m gpd_workers       # Serve the dashboard API on $PORT
"""

import asyncio
import logging
import os
import sys

import uvicorn

from gpd_workers.logging_config import setup_logging


async def run_server() -> dict:
    """Run uvicorn for the dashboard API until it is told to exit."""
    from gpd_backend.main import app

    config = uvicorn.Config(
        app=app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8080)),
        log_level="warning",
    )
    server = uvicorn.Server(config)

    logger = logging.getLogger(__name__)
    logger.info(f"Dashboard API starting on port {config.port}")

    await server.serve()
    return {"status": "shutdown"}


async def run_worker_task(job_type: str) -> dict:
    """Run the job named by job_type."""

    match job_type:
        case "aggregate":
            from gpd_workers.jobs.aggregate_job import run_aggregate_job
            return await run_aggregate_job()

        case "serve":
            return await run_server()

        case _:
            raise ValueError(f"Unknown job type: {job_type}")


async def main() -> None:
    job_id = setup_logging()
    logger = logging.getLogger(__name__)

    job_type = os.getenv("JOB_TYPE", "aggregate").lower()

    logger.info(
        "Starting job",
        extra={"job_type": job_type, "job_id": job_id},
    )

    try:
        result = await run_worker_task(job_type)
        logger.info(
            "Job completed successfully",
            extra={"job_type": job_type, "result": result},
        )
    except Exception as exc:
        logger.exception(
            f"Job failed: {exc}",
            extra={"job_type": job_type},
        )
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
