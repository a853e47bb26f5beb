"""Structured Logging — one JSON object per log record, configured once at startup.

Invariants:
    - Every record carries timestamp (from the record, UTC), level, logger and message
    - Only whitelisted extras are emitted (user_id, organization_id, old_id/new_id,
      error_code, attempt, path, counts): arbitrary extras never leak into log shippers
    - setup_logging is idempotent: calling it again replaces the handler instead of stacking one

Design Decisions:
    - JSONFormatter on stdlib logging, no logging dependency
    - log_format=text gives a human format for local runs
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "user_id", "organization_id", "old_id", "new_id",
    "error_code", "attempt", "path", "counts",
)

_HANDLER_NAME = "gatherwise"

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, record.__dict__[key]) for key in _EXTRA_KEYS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
