from __future__ import annotations

from typing import Any, Dict
import logging


APP_LOGGERS = ("backend", "backend.app")


def resolve_level(level: int | str) -> int:
    """Map a level name (case-insensitive) or number to a logging level, defaulting to INFO."""
    if isinstance(level, int):
        return level
    value = getattr(logging, str(level).upper(), None)
    return value if isinstance(value, int) else logging.INFO


def get_uvicorn_log_config(level: int | str = logging.INFO) -> Dict[str, Any]:
    """Return a logging dictConfig shared by uvicorn and the catalog loggers.

    Timestamps are HH:MM:SS; uvicorn's formatters supply the colored level prefix.
    """
    level = resolve_level(level)
    time_format = "%H:%M:%S"
    default_fmt = "%(asctime)s %(levelprefix)s [%(name)s] %(message)s"
    access_fmt = "%(asctime)s %(levelprefix)s %(client_addr)s - \"%(request_line)s\" %(status_code)s"

    handlers = {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": level,
            "stream": "ext://sys.stdout",
        },
        "access": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "level": level,
            "stream": "ext://sys.stdout",
        },
    }
    loggers: Dict[str, Any] = {
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
        # SQL echo stays quiet unless explicitly asked for
        "sqlalchemy.engine": {"handlers": ["default"], "level": logging.WARNING, "propagate": False},
    }
    for name in APP_LOGGERS:
        # Propagate to the root handler (keeps records visible to capture tools)
        loggers[name] = {"level": level, "propagate": True}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": default_fmt,
                "datefmt": time_format,
                "use_colors": None,
            },
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": access_fmt,
                "datefmt": time_format,
                "use_colors": None,
            },
        },
        "handlers": handlers,
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }
