"""
Logging configuration for the Coinbase helper client.

Console logging by default, optional rotating file and JSON output
(python-json-logger). Credentials are redacted on every handler.
"""

import copy
import logging
import logging.config
import os
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from .exceptions import SchemaValidationError

LOGGER_NAME = "coinbase_helper"

# HELPER_LOG_LEVEL values -> logging levels
LOG_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "redact_credentials": {
            "()": "coinbase_helper.utils.structured_logging.CredentialRedactionFilter"
        }
    },
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": (
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d "
                "- %(message)s (%(funcName)s)"
            ),
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "standard",
            "filters": ["redact_credentials"],
            "stream": "ext://sys.stderr"
        }
    },
    "loggers": {
        LOGGER_NAME: {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"]
    }
}


def resolve_level(level: Optional[str] = None) -> str:
    """
    Map a level name to a logging level name.

    Falls back to HELPER_LOG_LEVEL, then "info". Unknown names map to INFO.
    """
    name = (level or os.environ.get("HELPER_LOG_LEVEL") or "info").lower()
    return LOG_LEVELS.get(name, "INFO")


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False
) -> dict:
    """
    Setup logging configuration.

    Args:
        level: Log level (debug, info, warn, error)
        log_file: Optional rotating log file path
        json_format: Use JSON formatting

    Returns:
        The applied dictConfig
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    handlers = config["loggers"][LOGGER_NAME]["handlers"]

    config["loggers"][LOGGER_NAME]["level"] = resolve_level(level)

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filters": ["redact_credentials"],
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5
        }
        handlers.append("file")

    if json_format:
        for handler in config["handlers"].values():
            handler["formatter"] = "json"

    logging.config.dictConfig(config)
    return config


def format_error(error: BaseException) -> str:
    """
    Human-readable error text for CLI output.

    Pydantic validation errors are listed one field per line.
    """
    if isinstance(error, SchemaValidationError) and error.cause is not None:
        cause = error.cause
    elif isinstance(error.__cause__, PydanticValidationError):
        cause = error.__cause__
    else:
        cause = error

    if isinstance(cause, PydanticValidationError):
        lines = [f"{cause.error_count()} validation error(s) for {cause.title}"]
        for item in cause.errors():
            location = ".".join(str(part) for part in item["loc"]) or "(root)"
            lines.append(f"  {location}: {item['msg']}")
        return "\n".join(lines)

    if isinstance(error, Exception):
        return str(error)

    return repr(error)
