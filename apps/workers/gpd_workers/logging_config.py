"""Structured JSON logging for aggregation jobs"""

import json
import logging
import logging.config
import os
import uuid
from datetime import datetime, timezone

# Attributes every LogRecord carries; anything else arrived via `extra=`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def setup_logging() -> str:
    """
    Configures JSON structured logging on stderr.
    Returns a unique job_id for correlation across log entries.
    """
    job_id = os.getenv("JOB_ID", str(uuid.uuid4())[:8])

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "gpd_workers.logging_config.JsonFormatter",
                "job_id": job_id,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": os.getenv("LOG_LEVEL", "INFO"),
            "handlers": ["console"],
        },
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }

    logging.config.dictConfig(config)
    return job_id


class JsonFormatter(logging.Formatter):
    """
    Outputs log records as one JSON object per line.
    Includes job_id, timestamp, severity, message and any `extra=` fields.
    """

    def __init__(self, job_id: str = "", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.job_id = job_id

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "job_id": self.job_id,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_entry:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)
