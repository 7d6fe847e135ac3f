"""JSONL log of MCP tool executions, rotated daily."""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from typing import Any, Dict, Optional

TOOL_LOG_SUBDIR = "tool_execution_log"


def tool_log_path(log_dir: str, channel: str) -> str:
    return os.path.join(log_dir, TOOL_LOG_SUBDIR, f"tool_execution_log_{channel}.jsonl")


def setup_tool_logger(log_dir: Optional[str], channel: str) -> logging.Logger:
    """Logger writing one JSON object per line; file logging is off when log_dir is None."""
    logger = logging.getLogger(f"tool_execution.{channel}")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if logger.handlers:
        return logger

    if not log_dir:
        logger.addHandler(logging.NullHandler())
        return logger

    log_file = tool_log_path(log_dir, channel)
    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def tool_event(logger: logging.Logger, event_type: str, tool_name: str, **payload: Any) -> Dict[str, Any]:
    """Record one tool event and return the record that was written."""
    record: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "tool_name": tool_name,
    }
    if "duration_ms" in payload and payload["duration_ms"] is not None:
        payload["duration_ms"] = round(payload["duration_ms"], 1)
    record.update(payload)
    logger.info(json.dumps(record, default=str))
    return record
