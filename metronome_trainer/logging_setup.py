"""Logging setup for the trainer."""
from __future__ import annotations

import json
import logging
import sys
from typing import Any

# Optional ``extra=`` keys copied into JSON records when present.
CONTEXT_FIELDS = ("pattern", "bpm", "modality", "session_id", "seq")


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure root logging on stderr, as text or one JSON object per line."""
    level_value = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)-7s | %(name)s:%(funcName)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    logging.basicConfig(level=level_value, handlers=[handler], force=True)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "func": record.funcName,
            "line": record.lineno,
            "msg": record.getMessage(),
        }
        context = {k: getattr(record, k) for k in CONTEXT_FIELDS if hasattr(record, k)}
        if context:
            payload["context"] = {k: v if isinstance(v, (int, float)) else str(v) for k, v in context.items()}
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, ensure_ascii=False)
