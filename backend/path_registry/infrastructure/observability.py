"""Structured Logging — JSON lines for registry calls.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Registry fields (REGISTRY_FIELDS) appear only when the record sets them
    - At most one registry handler is installed on the root logger; calling
      setup_logging again swaps it instead of duplicating output

Design Decisions:
    - Stdlib logging with a JSON formatter, no structlog: the service already passes
      its fields through `extra`
    - Format chosen by name ("json" | "text") so Settings.log_format maps directly
"""

import json
import logging
from datetime import datetime, timezone

REGISTRY_FIELDS: tuple[str, ...] = (
    "operation", "caller", "owner", "path_id", "error_code", "block_height",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(operation)s] %(message)s"

_installed: logging.Handler | None = None


class JSONFormatter(logging.Formatter):
    """One JSON object per record, registry fields flattened to the top level."""

    def __init__(self, fields: tuple[str, ...] = REGISTRY_FIELDS):
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, record.__dict__[key])
            for key in self.fields
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _OperationDefault(logging.Filter):
    """Fill `operation` for records that did not set it, so TEXT_FORMAT never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "operation", None) is None:
            record.operation = "-"
        return True


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the registry handler on the root logger."""
    global _installed
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.addFilter(_OperationDefault())
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    if _installed is not None:
        logging.root.removeHandler(_installed)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _installed = handler
    return handler
