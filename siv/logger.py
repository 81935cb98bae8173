import json
import logging
from logging.config import dictConfig
from typing import Any, Dict

# --------------------------------------------------------------------------- #
# Logging configuration
# --------------------------------------------------------------------------- #
LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "siv": {
            "handlers": ["stderr"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}

dictConfig(LOGGING_CONFIG)

logger: logging.Logger = logging.getLogger("siv")


class SivLogger:
    """
    Structured events for ``siv``: every message is a JSON object
    ``{"event": ..., "data": {...}}``.
    """
    _logger: logging.Logger = logger

    @classmethod
    def debug(cls, event_type: str, **data: Any) -> None:
        cls._log_event(logging.DEBUG, event_type, data)

    @classmethod
    def info(cls, event_type: str, **data: Any) -> None:
        cls._log_event(logging.INFO, event_type, data)

    @classmethod
    def warning(cls, event_type: str, **data: Any) -> None:
        cls._log_event(logging.WARNING, event_type, data)

    @classmethod
    def _log_event(cls, level: int, event_type: str, data: Dict[str, Any]) -> None:
        if not cls._logger.isEnabledFor(level):
            return
        payload: Dict[str, Any] = {"event": event_type}
        if data:
            payload["data"] = data
        cls._logger.log(level, json.dumps(payload, default=str))


def set_level(level: int | str) -> None:
    logger.setLevel(level)
