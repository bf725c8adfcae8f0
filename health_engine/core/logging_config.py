"""
Logging setup for the engine and its HTTP layer.

One stdout handler, two formats:
- json: one JSON object per line, for log collectors
- text: aligned columns, for a local terminal

Every record is stamped with the current request id (if any) by
RequestIdFilter, so both formats can show it.

JSON line:
{
    "timestamp": "2024-01-15T10:30:00.123Z",
    "level": "DEBUG",
    "logger": "health_engine.services.streak_tracker",
    "message": "Streak calculated",
    "request_id": "3f2a9c1e",
    "extra": {"logged_days": 12, "current": 4, "longest": 9}
}

Usage:
    setup_logging(level="DEBUG", fmt="text")
    logger = logging.getLogger(__name__)
    logger.debug("Generated doses", extra={"count": 30})
"""

import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# =============================================================================
# REQUEST ID CONTEXT
# =============================================================================

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def clear_request_id() -> None:
    request_id_var.set(None)


class RequestIdFilter(logging.Filter):
    """Copy the request id from context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


# =============================================================================
# FORMATTERS
# =============================================================================

# LogRecord attributes that are never treated as caller-supplied extras
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id"}

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(request_id)-8s | %(name)s | %(message)s"


class JSONFormatter(logging.Formatter):
    """Single-line JSON. The timestamp is the record's creation time in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id in (None, "-"):
            request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Install the stdout handler on the root logger.

    uvicorn's loggers lose their own handlers and propagate to root, so
    access logs come out in the same format as engine logs.

    Args:
        level: Root log level name.
        fmt: "json" or "text".
    """
    level = level.upper()
    formatter = "json" if fmt.lower() == "json" else "text"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {
            "json": {"()": JSONFormatter},
            "text": {"format": TEXT_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": formatter,
                "filters": ["request_id"],
            },
        },
        "root": {"level": level, "handlers": ["stdout"]},
        "loggers": {
            name: {"handlers": [], "propagate": True}
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
        },
    })

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": formatter})
