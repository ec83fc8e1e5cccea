"""Directory traversal: find candidate files under a set of roots."""

from __future__ import annotations

from dataclasses import dataclass

from dupclean.errors import ConfigurationError
from dupclean.progress import ProgressFactory, open_progress

import fnmatch
import logging
import os
import pathlib
import stat


logger = logging.getLogger(__name__)

VCS_DIRS: tuple[str, ...] = (".git", ".svn")


@dataclass
class FileRecord:
    """A regular, non-empty file found during traversal.

    ``hash`` stays ``None`` until the hashing stage sets it; a record whose
    file could not be read keeps ``None`` and drops out of grouping.
    """

    path: pathlib.Path
    size: int
    hash: str | None = None


def _matches_any(name: str, patterns: list[str]) -> bool:
    """Check if name matches any of the glob patterns (case-insensitive)."""
    name_lower = name.lower()
    return any(fnmatch.fnmatch(name_lower, p.lower()) for p in patterns)


def _regular_file_record(path: pathlib.Path) -> FileRecord | None:
    """Return a record for *path* if it is a non-empty regular file."""
    try:
        st = os.lstat(path)
    except OSError as e:
        logger.debug(f"skipping unreadable entry {path}: {e}")
        return None
    if not stat.S_ISREG(st.st_mode):
        return None
    if st.st_size == 0:
        return None
    return FileRecord(path=path, size=st.st_size)


def walk(
    roots: list[pathlib.Path | str],
    *,
    exclude_dir: list[str] | tuple[str, ...] = (),
    progress: ProgressFactory | None = None,
) -> list[FileRecord]:
    """Recursively collect every non-empty regular file under *roots*.

    ``.git`` and ``.svn`` directories are never entered, nor is any
    directory whose name matches one of the *exclude_dir* globs. Symbolic
    links are not followed. Roots that cannot be made absolute or do not
    exist are skipped with a warning, unreadable directories are skipped
    silently.
    """
    if not roots:
        raise ConfigurationError("no roots specified")

    prune = list(VCS_DIRS) + list(exclude_dir)
    records: list[FileRecord] = []

    def on_error(err: OSError) -> None:
        logger.debug(f"skipping unreadable directory {err.filename}: {err.strerror}")

    with open_progress(progress, "Scanning") as bar:
        for root in roots:
            try:
                abs_root = pathlib.Path(root).absolute()
            except OSError as e:
                logger.warning(f"Cannot resolve {root}: {e}")
                continue

            if not abs_root.is_dir():
                bar.update(1)
                record = _regular_file_record(abs_root)
                if record is not None:
                    records.append(record)
                elif not os.path.lexists(abs_root):
                    logger.warning(f"Path not found: {abs_root}")
                continue

            if _matches_any(abs_root.name, prune):
                bar.update(1)
                logger.debug(f"pruning root {abs_root}")
                continue

            logger.debug(f"walking {abs_root}")
            for dirpath, dirnames, filenames in os.walk(abs_root, onerror=on_error):
                bar.update(1)
                kept = []
                for d in dirnames:
                    if _matches_any(d, prune):
                        logger.debug(f"pruning {os.path.join(dirpath, d)}")
                        continue
                    kept.append(d)
                dirnames[:] = sorted(kept)

                for name in sorted(filenames):
                    bar.update(1)
                    record = _regular_file_record(pathlib.Path(dirpath) / name)
                    if record is not None:
                        records.append(record)

    logger.debug(f"walk: {len(records)} candidate file(s) under {len(roots)} root(s)")
    return records
