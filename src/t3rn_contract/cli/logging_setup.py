"""Logging configuration for the CLI process.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
handler is installed here, once, by the entry point.  Rich renders the
records when available, a plain stderr handler otherwise.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Final

from t3rn_contract.core.models import Verbosity

LOG_ENV: Final[str] = "T3RN_CONTRACT_LOG"
DEFAULT_LEVEL: Final[int] = logging.WARNING
ROOT_LOGGER: Final[str] = "t3rn_contract"

_LEVELS: Final[dict[str, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def level_from_env(environ: Mapping[str, str] | None = None) -> int:
    """Read the log level from ``T3RN_CONTRACT_LOG`` (default WARNING)."""
    env = os.environ if environ is None else environ
    return _LEVELS.get(env.get(LOG_ENV, "").strip().lower(), DEFAULT_LEVEL)


def level_for(verbosity: Verbosity | None, base: int) -> int:
    """Adjust *base* for ``--verbose`` / ``--quiet``."""
    if verbosity is Verbosity.VERBOSE:
        return min(base, logging.DEBUG)
    if verbosity is Verbosity.QUIET:
        return max(base, logging.ERROR)
    return base


def _build_handler() -> logging.Handler:
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        return handler

    from t3rn_contract.cli.console import get_rich_console

    return RichHandler(
        console=get_rich_console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )


def configure_logging(level: int | None = None) -> logging.Logger:
    """Install the project handler on the package logger (idempotent)."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level if level is not None else level_from_env())
    if not logger.handlers:
        logger.addHandler(_build_handler())
    return logger
