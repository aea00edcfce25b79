"""
Logging configuration.

Logging is configured from the packaged `logging.yaml` (a `dictConfig` mapping).
The level comes from settings (`TRIPMUSE_LOG_LEVEL`) unless the caller passes one,
e.g. the CLI `--log-level` flag. Ranking-ladder steps and profile updates log at
DEBUG under `tripmuse.recommender` and `tripmuse.learning`.
"""

from __future__ import annotations

import copy
import logging.config

from tripmuse.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Apply the packaged logging config at `level` (default: the settings level)."""
    config = copy.deepcopy(get_logging_config())
    level = (level or get_settings().app.log_level).upper()

    config.setdefault("root", {})["level"] = level
    config.setdefault("loggers", {}).setdefault("tripmuse", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
