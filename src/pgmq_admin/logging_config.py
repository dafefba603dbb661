"""Logging setup and structured log fields for the admin services."""

import logging

from pythonjsonlogger import json as jsonlogger

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Configure the root logger with plain text or structured JSON output.

    JSON output format: {"ts": "...", "level": "...", "name": "...", "msg": "...", "operation": ...}

    Args:
        log_level: Logging level string (e.g., "info", "debug", "warning").
        json_output: Emit one JSON object per record instead of text lines.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    if json_output:
        formatter = jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={
                "asctime": "ts",
                "levelname": "level",
                "message": "msg",
            },
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def log_fields(
    operation: str,
    queue_name: str | None = None,
    msg_id: int | None = None,
    error: BaseException | None = None,
) -> dict:
    """Build the `extra` mapping attached to every service log record."""
    return {
        "operation": operation,
        "queue_name": queue_name,
        "msg_id": msg_id,
        "error": str(error) if error is not None else None,
    }
