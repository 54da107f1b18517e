"""
Logging configuration for gadgetctl consumers.

Library code only gets loggers; whatever runs the core (a CLI, a test
harness) calls configure_logging() once.
"""

import logging
import logging.config
import os
from typing import Any, Dict, Optional


class WebsocketNoiseFilter(logging.Filter):
    """Filter to suppress per-frame websocket debug logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop DEBUG records from the websocket client; keep everything else."""
        if record.name.startswith("websocket") and record.levelno <= logging.DEBUG:
            return False
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with websocket frame noise suppressed."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "websocket_noise_filter": {
                "()": WebsocketNoiseFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["websocket_noise_filter"]
            }
        },
        "loggers": {
            "gadgetctl": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "kubernetes": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            },
            "websocket": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the logging configuration; level defaults to $LOG_LEVEL or INFO."""
    logging.config.dictConfig(get_logging_config(level or os.environ.get("LOG_LEVEL", "INFO")))
