"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TextIO

from city_locator.common.constants import JSON_LOG_FIELDS
from city_locator.common.fs import ensure_dir
from city_locator.common.time_utils import utc_timestamp_iso


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": utc_timestamp_iso(),
            "level": record.levelname,
            "stage": getattr(record, "stage", None),
            "event": getattr(record, "event", None),
            "status": getattr(record, "status", None),
            "zip": getattr(record, "zip", None),
            "duration_ms": getattr(record, "duration_ms", None),
            "rows_in": getattr(record, "rows_in", None),
            "rows_out": getattr(record, "rows_out", None),
            "error_code": getattr(record, "error_code", None),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for field in JSON_LOG_FIELDS:
            payload.setdefault(field, None)
        return json.dumps(payload, ensure_ascii=False)


def build_logger(
    name: str = "city_locator",
    level: str = "INFO",
    log_path: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    level = level.upper()
    if level == "WARN":
        level = "WARNING"
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = False

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setFormatter(JsonLineFormatter())
    logger.addHandler(stream_handler)

    if log_path is not None:
        ensure_dir(log_path.parent)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)

    return logger


def log_event(logger: logging.Logger, message: str, *, level: int = logging.INFO, **event_fields: Any) -> None:
    logger.log(level, message, extra=event_fields)
