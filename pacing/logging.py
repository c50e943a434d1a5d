import logging.config
from typing import Any, Union

LoggerConfig = Union[str, dict[str, Any]]


def setup_logging(
    log_file: str | None = None,
    loggers: dict[str, LoggerConfig] | None = None,
    level: str = "DEBUG",
):
    """Configure the ``pacing`` loggers.

    :param log_file: Append records to this file. Records go to stderr when
        omitted.
    :param loggers: Per-logger overrides, either a level name or a full
        dictConfig logger entry.
    :param level: Level of the ``pacing`` logger.
    """
    if log_file is not None:
        handler = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
            "mode": "a",
        }
    else:
        handler = {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "{asctime} {levelname:<7} {name:<30} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "pacing": handler,
        },
        "loggers": {
            "pacing": {
                "handlers": ["pacing"],
                "level": level,
                "propagate": False,
            },
        },
    }

    if loggers is not None:
        for name, logger_config in loggers.items():
            match logger_config:
                case str(logger_level):
                    config["loggers"][name] = {"level": logger_level}
                case dict():
                    config["loggers"][name] = logger_config

    logging.config.dictConfig(config)
