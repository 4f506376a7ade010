"""Logging setup for fpvdrone.

Modules obtain their logger with ``get_logger(__name__)``. The application
calls ``initialize_logging()`` once at startup, optionally with a YAML file in
``logging.config.dictConfig`` format.

Typical usage example:
    from fpvdrone.core.logging_system import get_logger, initialize_logging

    initialize_logging("config/logging.yaml")
    logger = get_logger(__name__)
    logger.info("Ready")
"""

import logging
import logging.config
import logging.handlers
from pathlib import Path
from typing import Any

import yaml

ROOT_LOGGER_NAME = "fpvdrone"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PLATFORM_LOG_DIR = Path.home() / ".fpvdrone" / "logs"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name, usually ``__name__``.

    Returns:
        Standard library logger.
    """
    return logging.getLogger(name)


def _default_config(log_file: Path | None) -> dict[str, Any]:
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": "INFO",
        }
    }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": DEFAULT_FORMAT}},
        "handlers": handlers,
        "loggers": {
            ROOT_LOGGER_NAME: {
                "level": "DEBUG",
                "handlers": list(handlers),
                "propagate": False,
            }
        },
    }


def initialize_logging(config_path: str | None = None, use_platform_dir: bool = False) -> None:
    """Configure logging for the application.

    Args:
        config_path: YAML dictConfig file. Uses the built-in default if None.
        use_platform_dir: Write file logs under ``~/.fpvdrone/logs`` instead of
            the working directory. File handler ``filename`` entries in a YAML
            config are rebased there too.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If the YAML document is not a mapping.
    """
    log_dir = PLATFORM_LOG_DIR if use_platform_dir else Path("logs")

    if config_path is None:
        log_dir.mkdir(parents=True, exist_ok=True)
        config = _default_config(log_dir / "fpvdrone.log")
    else:
        path = Path(config_path)
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
        if not isinstance(config, dict):
            raise ValueError(f"Logging config must be a mapping: {path}")

        for handler in config.get("handlers", {}).values():
            if "filename" in handler:
                log_dir.mkdir(parents=True, exist_ok=True)
                handler["filename"] = str(log_dir / Path(handler["filename"]).name)

    logging.config.dictConfig(config)
    get_logger(__name__).debug("Logging initialized (config=%s)", config_path or "default")
