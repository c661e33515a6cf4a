"""Structured Logging — JSON/text formatters and one-time setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (issue_key, error_code, attempt, ...) surfaced when present
    - The log file under the config dir receives every record, including
      SUBMIT / AUTO-SUBMIT lines written by the completion dispatcher
    - setup_logging is idempotent: handlers it installed are replaced, not stacked
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

_EXTRA_KEYS = (
    "issue_key", "error_code", "attempt", "elapsed", "rounded",
    "completion", "operation", "path",
)
_HANDLER_MARK = "_unitrack_handler"


class JSONFormatter(logging.Formatter):
    """Format logs as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JSONFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")


def setup_logging(level: str = "INFO", fmt: str = "text", log_file: Path | None = None):
    """Configure root logging: stderr stream plus optional rotating file."""
    for handler in list(logging.root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logging.root.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8",
        ))
    for handler in handlers:
        handler.setFormatter(_build_formatter(fmt))
        setattr(handler, _HANDLER_MARK, True)
        logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
