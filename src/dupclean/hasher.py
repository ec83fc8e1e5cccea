"""2-phase duplicate detection: file size grouping, then content hashing."""

from __future__ import annotations

from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from dupclean.errors import ConfigurationError, Failure, join_failures
from dupclean.progress import ProgressFactory, open_progress
from dupclean.scanner import FileRecord, walk

import enum
import hashlib
import logging
import pathlib
import threading

logger = logging.getLogger(__name__)

DuplicateGroups = dict[str, list[FileRecord]]


class DigestAlgorithm(enum.Enum):
    """Supported content digests, weakest first."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @classmethod
    def from_name(cls, name: str | None) -> DigestAlgorithm:
        """Look up an algorithm by case-insensitive name.

        Unknown names fall back to MD5 instead of raising.
        """
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            logger.debug(f"unknown digest {name!r}, using {cls.MD5.value}")
            return cls.MD5

    def new(self):
        """Return a fresh digest accumulator. Never share one between threads."""
        return hashlib.new(self.value)


@dataclass
class Detection:
    """Result of a detection pass."""

    groups: DuplicateGroups = field(default_factory=dict)
    failures: list[Failure] = field(default_factory=list)
    scanned: int = 0
    candidates: int = 0

    @property
    def error(self) -> ExceptionGroup | None:
        return join_failures(f"{len(self.failures)} file(s) could not be hashed", self.failures)

    @property
    def duplicate_count(self) -> int:
        """Number of files in all duplicate groups."""
        return sum(len(g) for g in self.groups.values())


def hash_file(
    path: pathlib.Path | str,
    algorithm: DigestAlgorithm = DigestAlgorithm.MD5,
    chunk_size: int = 65536,
) -> str:
    """Compute the lowercase hex digest of a file's content."""
    h = algorithm.new()
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            h.update(chunk)
    return h.hexdigest()


def group_by_size(
    records: list[FileRecord], progress: ProgressFactory | None = None
) -> list[FileRecord]:
    """Drop every record whose size no other record shares."""
    if not records:
        return []

    size_groups: dict[int, list[FileRecord]] = defaultdict(list)
    with open_progress(progress, "Grouping by size", len(records)) as bar:
        for r in records:
            size_groups[r.size].append(r)
            bar.update(1)

    candidates = [r for group in size_groups.values() if len(group) >= 2 for r in group]
    logger.debug(
        f"phase 1 (size grouping): {len(records)} files -> "
        f"{sum(1 for g in size_groups.values() if len(g) < 2)} unique by size, "
        f"{len(candidates)} files to hash"
    )
    return candidates


def hash_records(
    records: list[FileRecord],
    algorithm: DigestAlgorithm | str = DigestAlgorithm.MD5,
    workers: int = 10,
    *,
    progress: ProgressFactory | None = None,
    cancel: threading.Event | None = None,
) -> list[Failure]:
    """Hash every record in place using at most *workers* concurrent tasks.

    Blocks until all tasks are done. Files that cannot be read keep
    ``hash=None`` and are returned as failures; they never stop the others.
    Setting *cancel* makes tasks that have not started yet skip their file.
    """
    if workers < 1:
        raise ConfigurationError(f"workers must be at least 1, got {workers}")
    if not isinstance(algorithm, DigestAlgorithm):
        algorithm = DigestAlgorithm.from_name(algorithm)
    if not records:
        return []
    if cancel is None:
        cancel = threading.Event()

    failures: list[Failure] = []
    lock = threading.Lock()

    def hash_one(record: FileRecord) -> None:
        if cancel.is_set():
            return
        try:
            record.hash = hash_file(record.path, algorithm)
        except OSError as e:
            logger.debug(f"cannot hash {record.path}: {e}")
            with lock:
                failures.append(Failure(record.path, e))

    logger.debug(f"hashing {len(records)} files with {algorithm.value}, {workers} worker(s)")
    with open_progress(progress, f"Hashing ({algorithm.value})", len(records)) as bar:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(hash_one, r) for r in records]
            try:
                for future in as_completed(futures):
                    future.result()
                    bar.update(1)
            except BaseException:
                cancel.set()
                raise

    return failures


def group_by_hash(
    records: list[FileRecord], progress: ProgressFactory | None = None
) -> DuplicateGroups:
    """Group hashed records by digest and drop digests seen only once."""
    hash_groups: dict[str, list[FileRecord]] = defaultdict(list)
    with open_progress(progress, "Grouping by hash", len(records)) as bar:
        for r in records:
            if r.hash:
                hash_groups[r.hash].append(r)
            bar.update(1)

    groups = {h: files for h, files in hash_groups.items() if len(files) >= 2}
    logger.debug(
        f"phase 2 (hash grouping): {len(hash_groups)} distinct digest(s), "
        f"{len(groups)} duplicate group(s)"
    )
    return groups


def find_duplicates(
    roots: list[pathlib.Path | str],
    algorithm: DigestAlgorithm | str = DigestAlgorithm.MD5,
    workers: int = 10,
    *,
    exclude_dir: list[str] | tuple[str, ...] = (),
    progress: ProgressFactory | None = None,
    cancel: threading.Event | None = None,
) -> Detection:
    """Find byte-identical files under *roots*.

    Phase 1: Group files by size (cheap).
    Phase 2: Hash only files sharing a size, then group by digest.
    """
    if workers < 1:
        raise ConfigurationError(f"workers must be at least 1, got {workers}")
    if not roots:
        raise ConfigurationError("no roots specified")

    records = walk(roots, exclude_dir=exclude_dir, progress=progress)
    candidates = group_by_size(records, progress)
    failures = hash_records(
        candidates, algorithm, workers, progress=progress, cancel=cancel
    )
    groups = group_by_hash(candidates, progress)
    return Detection(
        groups=groups,
        failures=failures,
        scanned=len(records),
        candidates=len(candidates),
    )
