"""Centralized logging setup for the integration harness."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO


class JsonFormatter(logging.Formatter):
    """Logging formatter that writes one JSON object per record."""

    def __init__(self, *args, run_id: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.run_id = run_id
        # Attributes every LogRecord carries are not copied into the output
        dummy_record = logging.LogRecord("name", logging.INFO, "path", 1, "msg", None, None)
        self._reserved_attrs = set(dummy_record.__dict__.keys())
        self._reserved_attrs.update({"message", "asctime", "stack_info"})

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record as a JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": record.name,
        }
        if self.run_id:
            log_entry["run_id"] = self.run_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in self._reserved_attrs:
                continue
            if key == "extra_fields" and isinstance(value, dict):
                log_entry.update(value)
            else:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: Optional[str] = None,
    *,
    run_id: Optional[str] = None,
    stream: Optional[TextIO] = None,
):
    """Initializes harness logging on the ``integration_harness`` logger.

    Only the harness logger is configured so that the test runner's own
    log capture keeps working.

    Args:
        level: Optional log level override. Defaults to HARNESS_LOG_LEVEL or INFO.
        run_id: Optional run identifier stamped on every record.
        stream: Where to write. Defaults to stderr.
    """
    log_level = (level or os.environ.get("HARNESS_LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger("integration_harness")
    logger.setLevel(log_level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter(run_id=run_id))

    for h in logger.handlers[:]:
        logger.removeHandler(h)

    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Retrieves a logger with the given name.

    Args:
        name: The name of the logger (typically __name__).

    Returns:
        A logging.Logger instance.
    """
    return logging.getLogger(name)
