"""
Linager Logging Configuration

Environment variables:
- LINAGER_DEBUG: Enable debug logging (default: the config.yaml ``debug`` key)
- LINAGER_LOG_FILE: Also log to this file; stderr then only shows warnings
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "linager"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("true", "1", "yes")


def _debug_default() -> bool:
    if os.environ.get("LINAGER_DEBUG"):
        return _env_flag("LINAGER_DEBUG")
    from linager.configs.yaml_config import load_yaml_config

    return bool(load_yaml_config().get("debug", False))


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``linager`` logger tree.

    Args:
        debug: Debug level instead of info. Defaults to LINAGER_DEBUG,
               then the ``debug`` key of config.yaml.
        log_file: Extra file destination. Defaults to LINAGER_LOG_FILE.

    Returns:
        The ``linager`` logger
    """
    if debug is None:
        debug = _debug_default()
    if log_file is None:
        log_file = os.environ.get("LINAGER_LOG_FILE") or None
    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    if not log_file:
        logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level))
        return logger

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), logging.WARNING))
    logger.addHandler(_handler(logging.FileHandler(log_file), level))
    logger.info(f"Logging to file: {log_file}")
    return logger


def get_logger(component: str) -> logging.Logger:
    """Logger for a component, e.g. ``get_logger("inspector.golang")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")
