"""Central logging setup for survivor_pool entrypoints.

The root level comes from ``LOG_LEVEL`` (seeded from ``config.json`` by
``apply_environment_defaults``). Per-module levels, e.g. silencing the
per-row ``survivor_pool.classes.pick_ingest`` warnings during a bulk
re-import, come from the ``logger_levels`` mapping in ``config.json``.
"""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Mapping

from survivor_pool.paths import repo_file

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _level_number(name: str | None) -> int | None:
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else None


def _apply_logger_levels(logger_levels: Mapping[str, str]) -> None:
    for logger_name, level_name in logger_levels.items():
        level = _level_number(level_name)
        if level is None:
            logging.getLogger(__name__).warning("Ignoring unknown level %r for logger %s", level_name, logger_name)
            continue
        logging.getLogger(logger_name).setLevel(level)


def configure_logging(logger_levels: Mapping[str, str] | None = None) -> logging.Logger:
    root_level = _level_number(os.getenv("LOG_LEVEL"))
    if root_level is None:
        root_level = logging.INFO
    config_path = repo_file("logging.ini")
    if config_path.is_file():
        logging.config.fileConfig(str(config_path), disable_existing_loggers=False)
        logger = logging.getLogger()
        logger.setLevel(root_level)
        _apply_logger_levels(logger_levels or {})
        return logger

    logger = logging.getLogger()
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(root_level)
    _apply_logger_levels(logger_levels or {})
    return logger
