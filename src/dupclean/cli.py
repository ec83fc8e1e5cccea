"""CLI argument parsing and subcommand dispatch."""

from __future__ import annotations

from dupclean.cleaner import clean
from dupclean.config import create_config_interactive
from dupclean.config import load_config
from dupclean.config import merge_config_into_args
from dupclean.errors import ConfigurationError
from dupclean.errors import ListFileError
from dupclean.errors import NoDuplicatesError
from dupclean.hasher import DigestAlgorithm
from dupclean.hasher import find_duplicates
from dupclean.listfile import read_list
from dupclean.listfile import write_list
from dupclean.logging import configure_logging
from dupclean.logging import progress_safe_logging
from dupclean.progress import null_progress
from dupclean.progress import tqdm_progress

import argparse
import logging
import pathlib
import sys


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="dupclean",
        description=(
            "Find byte-identical files and delete the copies you choose. "
            "'list' writes an editable list of duplicate groups; remove the lines "
            "of the files to keep, then pass the list to 'clean'."
        ),
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")
    parser.add_argument(
        "--configure", action="store_true",
        help="Interactively create or update the config file",
    )
    parser.add_argument(
        "--no-progress", dest="progress", action="store_false", default=None,
        help="Do not draw progress bars",
    )
    sub = parser.add_subparsers(dest="command")

    # --- list ---
    p_list = sub.add_parser("list", help="List duplicate files under the given directories")
    p_list.add_argument("roots", nargs="*", type=pathlib.Path, metavar="ROOT", help="Directory to scan")
    p_list.add_argument(
        "-f", "--algorithm", default=None, metavar="NAME",
        help="Digest: md5 | sha1 | sha256 | sha512 (default: md5)",
    )
    p_list.add_argument(
        "-n", "--workers", type=int, default=None, metavar="N",
        help="Number of files hashed at the same time (default: 10)",
    )
    p_list.add_argument(
        "-o", "--output", type=pathlib.Path, default=None, metavar="FILE",
        help="Write the duplicate list to FILE (default: list.txt)",
    )
    p_list.add_argument(
        "--exclude-dir", action="append", default=None, metavar="PATTERN",
        help="Glob pattern of directories to skip (e.g., 'node_modules'). Repeatable.",
    )

    # --- clean ---
    p_clean = sub.add_parser("clean", help="Delete every file named in the given list file(s)")
    p_clean.add_argument("lists", nargs="*", type=pathlib.Path, metavar="LIST", help="Edited list file")

    return parser


def cmd_list(args: argparse.Namespace) -> None:
    """Find duplicates and write them to the list file."""
    algorithm = DigestAlgorithm.from_name(args.algorithm)
    progress = tqdm_progress if args.progress else null_progress

    logger.debug(f"roots={args.roots} algorithm={algorithm.value} workers={args.workers}")
    detection = find_duplicates(
        args.roots,
        algorithm,
        args.workers,
        exclude_dir=args.exclude_dir,
        progress=progress,
    )

    for failure in detection.failures:
        logger.warning(f"Could not hash {failure}")
    if detection.error is not None:
        logger.warning(f"{detection.error.message}; they are left out of the list.")

    write_list(detection.groups, args.output, echo=logger.info)
    logger.info(
        f"\nFound {len(detection.groups)} duplicate group(s) with {detection.duplicate_count} files "
        f"(scanned {detection.scanned}, hashed {detection.candidates})."
    )
    logger.info(f"List written to {args.output}. Remove the lines of the files to keep, then run 'dupclean clean {args.output}'.")


def cmd_clean(args: argparse.Namespace) -> bool:
    """Delete the files named in the list file(s). Returns False on partial failure."""
    if not args.lists:
        raise ConfigurationError("no list file specified")

    paths = read_list(args.lists)
    progress = tqdm_progress if args.progress else null_progress
    outcome = clean(paths, progress)

    for failure in outcome.failures:
        logger.warning(f"Could not delete {failure}")
    logger.info(f"Cleaned {outcome.succeeded} file(s).")
    if outcome.error is not None:
        logger.warning(f"{outcome.error.message}.")
        return False
    return True


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    if args.configure:
        create_config_interactive()
        return

    if not args.command:
        parser.print_help()
        return

    merge_config_into_args(args, load_config())

    commands = {
        "list": cmd_list,
        "clean": cmd_clean,
    }

    try:
        with progress_safe_logging():
            ok = commands[args.command](args)
    except (ConfigurationError, ListFileError, OSError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except NoDuplicatesError:
        logger.info("No duplicates found.")
        return
    except KeyboardInterrupt:
        logger.info("\nAborted.")
        sys.exit(130)

    if ok is False:
        sys.exit(1)
