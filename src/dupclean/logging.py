"""Logging setup: console handler levels and cooperation with progress bars."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from tqdm.contrib.logging import logging_redirect_tqdm

import logging

LOGGER_NAME = "dupclean"


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Configure the dupclean logger and return it.

    Normal runs print bare messages at INFO; ``--verbose`` adds DEBUG output
    prefixed with level and module, ``--quiet`` keeps only warnings and errors.
    """
    if verbose:
        level = logging.DEBUG
        fmt = "%(levelname)s [%(name)s]: %(message)s"
    elif quiet:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.INFO
        fmt = "%(message)s"

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    logger.setLevel(level)
    logger.addHandler(handler)
    return logger


@contextmanager
def progress_safe_logging() -> Iterator[None]:
    """Route dupclean log records through tqdm while progress bars are drawn."""
    with logging_redirect_tqdm(loggers=[logging.getLogger(LOGGER_NAME)]):
        yield
