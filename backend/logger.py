"""Structured logging configuration for the recruiter conversation assistant."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including fields passed via ``extra``."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_logging(log_level: str = "INFO", log_format: str = "json", log_file: Optional[str] = None) -> None:
    """
    Replace the root handlers with JSON (or plain text) handlers.

    Args:
        log_level: Name of the minimum level to emit
        log_format: "json" for structured output, anything else for plain text
        log_file: Optional file that receives the same records as stderr
    """
    if log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper()))
