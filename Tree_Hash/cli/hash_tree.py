import argparse
import asyncio
import logging
import sys
import threading
from typing import Any, Dict, Optional, Sequence

from Tree_Hash.cli.logging_setup import setup_logging
from Tree_Hash.cli.settings import (
    load_settings,
    validate_settings,
    walk_options_from_settings,
)
from Tree_Hash.core.errors import EXIT_ERROR, EXIT_USAGE, TreeHashError
from Tree_Hash.core.ignore import IgnoreRules
from Tree_Hash.core.models import SYMLINK_POLICIES, WalkOptions
from Tree_Hash.core.walker import (
    compute_merged_tree_hash,
    compute_tree_hash,
    compute_tree_hash_async,
)


logger = logging.getLogger(__name__)

EXIT_OK = 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tree-hash",
        description="Print the git-style tree hash of a directory.",
    )
    p.add_argument("directory", nargs="?", help="Directory to hash")
    p.add_argument(
        "--overlay",
        action="append",
        default=[],
        metavar="DIR",
        help="Layer another directory on top (later wins). Repeatable.",
    )
    p.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Glob of paths to leave out. Repeatable.",
    )
    p.add_argument(
        "--no-exec-bit",
        action="store_true",
        help="Hash every file as 100644 regardless of permissions.",
    )
    p.add_argument(
        "--git-modes",
        action="store_true",
        help="Write directory modes as git does (40000) to match git write-tree.",
    )
    p.add_argument("--symlinks", choices=SYMLINK_POLICIES)
    p.add_argument(
        "--strict-permissions",
        action="store_true",
        help="Fail instead of assuming 100644 when permissions cannot be read.",
    )
    p.add_argument(
        "-j",
        "--jobs",
        type=int,
        metavar="N",
        help="Hash sibling directories concurrently with N workers.",
    )
    p.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Give up after SECONDS. A file read already in progress still "
        "completes in the background before the process exits.",
    )
    p.add_argument("--settings", metavar="PATH", help="Alternative settings.json")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def apply_overrides(settings: Dict[str, Any], args) -> Dict[str, Any]:
    hashing = settings["hashing"]
    walk = settings["walk"]

    if args.no_exec_bit:
        hashing["honor_executable_bit"] = False
    if args.git_modes:
        hashing["git_object_modes"] = True
    if args.symlinks:
        hashing["symlinks"] = args.symlinks
    if args.strict_permissions:
        hashing["strict_permission_probe"] = True

    walk["ignore_patterns"] = list(walk["ignore_patterns"]) + list(args.ignore)
    if args.jobs is not None:
        walk["max_workers"] = args.jobs
    if args.timeout is not None:
        walk["timeout_seconds"] = args.timeout

    if args.verbose == 1:
        settings["logging"]["level"] = "INFO"
    elif args.verbose > 1:
        settings["logging"]["level"] = "DEBUG"

    validate_settings(settings)
    return settings


def run(
    directory: str,
    overlays: Sequence[str],
    settings: Dict[str, Any],
    options: WalkOptions,
) -> str:
    ignore = IgnoreRules(settings["walk"]["ignore_patterns"])
    workers = settings["walk"]["max_workers"]
    timeout = settings["walk"]["timeout_seconds"]

    if workers > 1 and not overlays:
        return asyncio.run(
            compute_tree_hash_async(
                directory,
                ignore=ignore,
                options=options,
                max_workers=workers,
                timeout=timeout,
            )
        )

    cancel = threading.Event()
    timer = None
    if timeout is not None:
        timer = threading.Timer(timeout, cancel.set)
        timer.daemon = True
        timer.start()

    try:
        if overlays:
            return compute_merged_tree_hash(
                [directory, *overlays],
                ignore=ignore,
                options=options,
                cancel=cancel,
            )
        return compute_tree_hash(
            directory,
            ignore=ignore,
            options=options,
            cancel=cancel,
        )
    finally:
        if timer is not None:
            timer.cancel()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.directory is None:
        parser.print_usage(sys.stderr)
        print("Error: a directory argument is required", file=sys.stderr)
        return EXIT_USAGE

    try:
        settings = apply_overrides(load_settings(args.settings), args)
        options = walk_options_from_settings(settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(settings["logging"]["level"])

    try:
        digest = run(args.directory, args.overlay, settings, options)
    except TreeHashError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"Error calculating tree hash: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(digest)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
