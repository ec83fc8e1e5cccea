"""Reading and writing the editable duplicate list.

The list file holds one block per duplicate group::

    --------
    /photos/a.jpg\t1024B\t5d41402abc4b2a76b9719d911017c592
    /backup/a.jpg\t1024B\t5d41402abc4b2a76b9719d911017c592

The user deletes the lines of the copies to keep; ``clean`` then removes
every path still listed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from dupclean.errors import ListFileError, NoDuplicatesError
from dupclean.hasher import DuplicateGroups
from dupclean.scanner import FileRecord

import logging
import pathlib

DELIMITER = "--------"

logger = logging.getLogger(__name__)


def format_record(record: FileRecord) -> str:
    """Render one list line (without newline)."""
    return f"{record.path}\t{record.size}B\t{record.hash}"


def write_list(
    groups: DuplicateGroups,
    destination: pathlib.Path,
    *,
    echo: Callable[[str], object] | None = None,
) -> int:
    """Write *groups* to *destination*, mirroring each line to *echo*.

    Returns the number of file lines written. Raises NoDuplicatesError
    without touching *destination* when there is nothing to write. Path
    names that are not valid UTF-8 are written back as their original bytes.
    """
    if not groups:
        raise NoDuplicatesError("no duplicate files found")

    written = 0
    with destination.open("w", encoding="utf-8", errors="surrogateescape", newline="\n") as f:
        for records in groups.values():
            lines = [DELIMITER] + [format_record(r) for r in records]
            for line in lines:
                f.write(line + "\n")
                if echo is not None:
                    echo(line)
            written += len(records)
    return written


def _iter_lines(source: pathlib.Path) -> Iterator[tuple[int, str]]:
    """Yield (line number, line without line ending) of a list file."""
    try:
        with source.open("r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            for lineno, line in enumerate(f, 1):
                yield lineno, line.rstrip("\n").removesuffix("\r")
    except OSError as e:
        raise ListFileError(source, f"cannot read list file: {e}") from e


def read_groups(source: pathlib.Path) -> list[list[str]]:
    """Return the listed paths of *source* split at delimiter lines.

    Of every line only the text before the first tab is used. Empty lines
    are rejected, since guessing at them could delete the wrong file.
    Groups left empty after editing are dropped.
    """
    groups: list[list[str]] = []
    current: list[str] | None = None
    for lineno, line in _iter_lines(source):
        if line == DELIMITER:
            current = []
            groups.append(current)
            continue
        if not line:
            raise ListFileError(source, f"line {lineno} is empty; every line must hold a file path")
        if current is None:
            current = []
            groups.append(current)
        current.append(line.split("\t", 1)[0])
    return [g for g in groups if g]


def read_list(sources: list[pathlib.Path]) -> list[str]:
    """Return the paths listed in *sources*, in order."""
    paths: list[str] = []
    for source in sources:
        for group in read_groups(source):
            logger.debug(f"{source}: group of {len(group)} path(s)")
            paths.extend(group)
    return paths
