import logging
import logging.config
import sys
from typing import Optional

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,

    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            "json_ensure_ascii": False,
        },
        "console": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },

    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",  # "console" for plain-text output
            "stream": sys.stdout,
        },
    },

    "loggers": {
        "kryos": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },

    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
}


def configure_logging(level: Optional[str] = None, config: Optional[dict] = None) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Level name for the ``kryos`` logger, e.g. "DEBUG".
        config: Custom dictConfig mapping. Uses LOGGING_CONFIG if not provided.
    """
    if config is None:
        config = {**LOGGING_CONFIG, "loggers": {
            name: dict(logger_conf) for name, logger_conf in LOGGING_CONFIG["loggers"].items()
        }}
        if level:
            config["loggers"]["kryos"]["level"] = level

    logging.config.dictConfig(config)

    logger = logging.getLogger("kryos")
    logger.debug("Logging configured")
    return logger
