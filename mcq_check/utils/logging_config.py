"""Logging setup for the mcq-check command line.

Library modules only call ``logging.getLogger(__name__)``. Handlers and
levels are configured once, by the CLI, through ``setup_logging``. The
level usually comes from ``CheckSettings.log_level`` (``MCQ_CHECK_LOG_LEVEL``)
and ``-v`` forces DEBUG.
"""

from __future__ import annotations

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# matplotlib logs font discovery at DEBUG; keep it out of per-question traces.
NOISY_LOGGERS = ("matplotlib",)


def setup_logging(verbose: bool = False, level: int | str | None = None) -> None:
    """Configure root logging for a validation run.

    Args:
        verbose: Log per-question decisions at DEBUG. Wins over `level`.
        level: Level as an int or a name such as "WARNING"; INFO if omitted.
    """
    if verbose:
        effective_level = logging.DEBUG
    elif isinstance(level, str):
        effective_level = logging.getLevelName(level.upper())
    elif level is not None:
        effective_level = level
    else:
        effective_level = logging.INFO

    if not isinstance(effective_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    logging.basicConfig(level=effective_level, format=DEFAULT_LOG_FORMAT)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective_level, logging.WARNING))
