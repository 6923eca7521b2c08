"""Process-wide logging setup shared by the API, the worker and the sync client."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from practice_log.core.context import get_request_id

# Chatty transports: only warnings and above.
_QUIET_LOGGERS = ("httpx", "httpcore", "apscheduler", "urllib3")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - minimal logic
        record.request_id = get_request_id() or "-"
        return True


def configure_logging(*, log_level: str = "INFO", access_log: bool = True) -> None:
    """Install console handlers once per process.

    ``practice_log.access`` gets its own terse format and does not propagate, so
    access lines are not duplicated by the root handler.
    """
    if getattr(configure_logging, "_configured", False):
        return

    loggers = {name: {"level": "WARNING"} for name in _QUIET_LOGGERS}
    loggers["practice_log.access"] = {
        "handlers": ["access"],
        "level": "INFO" if access_log else "WARNING",
        "propagate": False,
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
                },
                "access": {
                    "format": "%(asctime)s | access | %(request_id)s | %(message)s",
                },
            },
            "filters": {
                "request_id": {"()": "practice_log.core.logging.RequestIdFilter"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": log_level,
                    "filters": ["request_id"],
                },
                "access": {
                    "class": "logging.StreamHandler",
                    "formatter": "access",
                    "filters": ["request_id"],
                },
            },
            "loggers": loggers,
            "root": {"handlers": ["console"], "level": log_level},
        }
    )

    logging.getLogger(__name__).debug("Logging configured at %s (access_log=%s)", log_level, access_log)
    setattr(configure_logging, "_configured", True)
