"""Exceptions and per-item failure records."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass


class ConfigurationError(ValueError):
    """Invalid invocation, detected before any work is done."""


class ListFileError(ValueError):
    """A deletion list could not be read or contains a malformed line."""

    def __init__(self, source: pathlib.Path | str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class NoDuplicatesError(LookupError):
    """Detection finished without finding any duplicate group."""


@dataclass
class Failure:
    """A single path that could not be hashed or deleted."""

    path: pathlib.Path | str
    error: OSError

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


def join_failures(message: str, failures: list[Failure]) -> ExceptionGroup | None:
    """Join per-item failures into one ExceptionGroup, or None if there are none."""
    if not failures:
        return None
    return ExceptionGroup(message, [f.error for f in failures])
