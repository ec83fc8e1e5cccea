"""Delete a curated list of files."""

from __future__ import annotations

from dataclasses import dataclass, field

from dupclean.errors import Failure, join_failures
from dupclean.progress import ProgressFactory, open_progress

import logging
import os
import pathlib


logger = logging.getLogger(__name__)


@dataclass
class DeletionOutcome:
    """How many paths were deleted and which ones failed."""

    succeeded: int = 0
    failures: list[Failure] = field(default_factory=list)

    @property
    def error(self) -> ExceptionGroup | None:
        return join_failures(f"{len(self.failures)} file(s) could not be deleted", self.failures)


def clean(
    paths: list[pathlib.Path | str], progress: ProgressFactory | None = None
) -> DeletionOutcome:
    """Delete every path in *paths*, continuing past individual failures.

    Deletion is permanent. The list is trusted as given: nothing checks that
    a path was part of a duplicate group, and repeated or already missing
    paths simply show up as failures.
    """
    outcome = DeletionOutcome()
    if not paths:
        return outcome

    with open_progress(progress, "Cleaning", len(paths)) as bar:
        for path in paths:
            try:
                os.remove(path)
            except OSError as e:
                logger.debug(f"cannot delete {path}: {e}")
                outcome.failures.append(Failure(path, e))
            else:
                logger.debug(f"deleted {path}")
                outcome.succeeded += 1
            bar.update(1)

    return outcome
