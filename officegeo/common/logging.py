"""One JSON object per log line, with a fixed set of keys."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from officegeo.common.constants import JSON_LOG_FIELDS
from officegeo.common.fs import ensure_dir
from officegeo.common.time_utils import utc_timestamp_iso


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {field: getattr(record, field, None) for field in JSON_LOG_FIELDS}
        payload["timestamp"] = utc_timestamp_iso()
        payload["level"] = record.levelname
        payload["message"] = record.getMessage()
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_logger(run_id: str, data_dir: Path | None = None, level: str = "INFO") -> logging.Logger:
    """Logger writing to stderr and, with ``data_dir``, to ``logs/<run_id>.log.jsonl``."""
    logger = logging.getLogger(f"officegeo.run.{run_id}")
    logger.setLevel(level.upper())
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if data_dir is not None:
        log_dir = data_dir / "logs"
        ensure_dir(log_dir)
        handlers.append(logging.FileHandler(log_dir / f"{run_id}.log.jsonl", encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(JsonLineFormatter())
        logger.addHandler(handler)
    return logger


def log_event(logger: logging.Logger, message: str, **event_fields: Any) -> None:
    logger.info(message, extra=event_fields)
