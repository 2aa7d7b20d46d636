"""
Shared helpers.

Logging is configured once with dictConfig the first time a module asks for
a logger, so every module can simply do `log = get_logger(__name__)`.
"""
import logging
import logging.config
from typing import Any, Dict

from hub.core import config


LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "loggers": {
        "hub": {"handlers": ["console"], "level": config.LOG_LEVEL, "propagate": False},
    },
}

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the `hub` logger tree on first use."""
    global _configured
    if not _configured:
        logging.config.dictConfig(LOGGING_CONFIG)
        _configured = True
    return logging.getLogger(name)
