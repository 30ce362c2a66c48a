"""Logging setup: JSON lines for collectors, plain text for operators."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

_handler: logging.Handler | None = None


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("source", "tick"):
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Configure the root logger; a repeated call replaces the earlier handler."""
    global _handler
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    if _handler is not None:
        logging.root.removeHandler(_handler)
    logging.root.addHandler(handler)
    _handler = handler
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
