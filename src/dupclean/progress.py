"""Progress reporting for long-running stages.

A progress factory is any callable ``(description, total) -> bar`` where the
bar offers ``update(n=1)`` and ``close()``. ``total`` is ``None`` when the
amount of work is not known in advance (directory traversal). tqdm bars
satisfy this interface directly.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from tqdm import tqdm

import logging


logger = logging.getLogger(__name__)


class ProgressBar(Protocol):
    def update(self, n: int = 1) -> object: ...

    def close(self) -> None: ...


ProgressFactory = Callable[[str, int | None], ProgressBar]


def tqdm_progress(description: str, total: int | None) -> ProgressBar:
    """Progress bar on stderr, removed from the terminal once the stage ends."""
    return tqdm(total=total, desc=description, unit="file", leave=False)


class NullProgress:
    """Progress bar that reports nothing."""

    def update(self, n: int = 1) -> None:
        pass

    def close(self) -> None:
        pass


def null_progress(description: str, total: int | None) -> ProgressBar:
    return NullProgress()


class _GuardedProgress:
    """Wrap a bar so that a failing sink never interrupts the stage using it."""

    def __init__(self, bar: ProgressBar | None):
        self._bar = bar

    def update(self, n: int = 1) -> None:
        if self._bar is None:
            return
        try:
            self._bar.update(n)
        except Exception as e:
            logger.debug(f"progress sink failed, disabling it: {e}")
            self._bar = None

    def close(self) -> None:
        if self._bar is None:
            return
        try:
            self._bar.close()
        except Exception as e:
            logger.debug(f"progress sink failed to close: {e}")
        self._bar = None

    def __enter__(self) -> _GuardedProgress:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_progress(
    factory: ProgressFactory | None, description: str, total: int | None = None
) -> _GuardedProgress:
    """Open a guarded bar from *factory*; a missing or broken factory reports nothing."""
    if factory is None:
        factory = null_progress
    try:
        bar = factory(description, total)
    except Exception as e:
        logger.debug(f"progress sink could not be opened: {e}")
        bar = None
    return _GuardedProgress(bar)
