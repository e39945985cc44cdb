"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (tenant_id, path, status_code, error_code) surfaced when present
    - JSON format in production, human-readable in development
    - Diagnostic output only: the crash-report pipeline logs here, it never
      ships logs anywhere

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once per process (server.main or app lifespan)
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "tenant_id", "path", "method", "status_code", "error_code",
    "exception_type", "endpoint_url", "source_file", "source_line",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


_configured = False


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure root logging. Idempotent: a second call only adjusts the level."""
    global _configured
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _configured:
        return
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    _configured = True
