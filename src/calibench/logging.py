"""Logging setup for calibench.

The report goes to stdout through click; everything else (progress,
per-sample diagnostics, warnings) goes through the ``calibench`` logger
to stderr, so redirecting stdout captures a clean report.

Console levels:
    --verbose   DEBUG: calibration scale, every sample, RSS deltas
    (default)   INFO: run notes such as where an export was written
    --quiet     WARNING: only problems

A ``--log-file`` always records DEBUG with timestamps, whatever the
console level.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "calibench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(message)s"


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Console log level for the given flags; *verbose* wins over *quiet*."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """(Re)configure the calibench logger and return it.

    Handlers from a previous call are closed and replaced, so this can
    be called again once a profile has been read.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    _drop_handlers(logger)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level(verbose=verbose, quiet=quiet))
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger ``calibench.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
