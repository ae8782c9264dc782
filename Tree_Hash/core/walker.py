import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import List, Sequence

from .blob import hash_blob
from .errors import (
    HashCancelled,
    NotADirectory,
    PathNotFound,
    UnreadableDirectory,
)
from .ignore import IgnoreRules
from .models import DirectoryEntry, ModeTag, ResolvedEntry, WalkOptions
from .modes import resolve_mode
from .ordering import sort_entries
from .source import KIND_DIR, ContentSource, FilesystemSource, OverlaySource
from .tree import hash_tree


logger = logging.getLogger(__name__)

# Version-control bookkeeping, never part of the hashed content
METADATA_DIR_NAME = ".git"


# ============================================================
# Shared steps
# ============================================================

@dataclass
class _Walk:
    source: ContentSource
    ignore: IgnoreRules
    options: WalkOptions


def _make_walk(source, ignore, options) -> _Walk:
    return _Walk(
        source=source or FilesystemSource(),
        ignore=ignore or IgnoreRules(),
        options=options or WalkOptions(),
    )


def _relative(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def _open_root(source: ContentSource, path) -> PurePath:
    root = source.normalize(path)
    kind = source.kind(root)
    if kind is None:
        raise PathNotFound(root)
    if kind != KIND_DIR:
        raise NotADirectory(root)
    return root


def _identity(walk: _Walk, path: PurePath):
    try:
        return walk.source.identity(path)
    except OSError as e:
        raise UnreadableDirectory(path, e.strerror or e) from e


def _list_children(walk: _Walk, path: PurePath, rel: str) -> List[DirectoryEntry]:
    try:
        listing = walk.source.list_dir(path)
    except OSError as e:
        raise UnreadableDirectory(path, e.strerror or e) from e

    children = []
    for entry in listing:
        if entry.name == METADATA_DIR_NAME:
            continue

        entry_rel = _relative(rel, entry.name)

        if entry.is_symlink and walk.options.symlinks == "skip":
            logger.info("Skipping symlink: %s", entry_rel)
            continue

        if walk.ignore.should_ignore(entry_rel, entry.is_directory):
            logger.info("Ignoring: %s", entry_rel)
            continue

        children.append(entry)
    return children


def _resolve_file(walk: _Walk, path: PurePath, rel: str, name: str) -> ResolvedEntry:
    mode = resolve_mode(walk.source, path, walk.options)
    digest = hash_blob(walk.source, path, chunk_size=walk.options.chunk_size)
    logger.debug("CHECKSUM FILE: %s -> %s %s", rel, mode.value, digest.hex())
    return ResolvedEntry(mode=mode, name=name, hash=digest)


def _finish_directory(walk: _Walk, rel: str, resolved) -> bytes:
    digest = hash_tree(
        sort_entries(resolved),
        git_object_modes=walk.options.git_object_modes,
    )
    if rel:
        logger.debug("CHECKSUM DIR:  %s/ -> %s", rel, digest.hex())
    return digest


# ============================================================
# SYNC IMPLEMENTATION (explicit post-order stack)
# ============================================================

@dataclass
class _Frame:
    path: PurePath
    rel: str
    name: str | None
    pending: List[DirectoryEntry]
    identity: object = None
    resolved: List[ResolvedEntry] = field(default_factory=list)


def _open_frame(walk, path, rel, name, stack) -> _Frame:
    identity = None
    if walk.options.symlinks == "follow":
        identity = _identity(walk, path)
        if any(f.identity == identity for f in stack):
            raise UnreadableDirectory(path, "symbolic link cycle")

    return _Frame(
        path=path,
        rel=rel,
        name=name,
        pending=_list_children(walk, path, rel),
        identity=identity,
    )


def compute_tree_hash(
    path,
    *,
    source: ContentSource | None = None,
    ignore: IgnoreRules | None = None,
    options: WalkOptions | None = None,
    cancel: threading.Event | None = None,
) -> str:
    """
    Compute the tree hash of a directory and return it as 40 hex chars.

    Subdirectories are finished before their parent (post-order) using
    an explicit stack, so arbitrarily deep trees are fine. The ".git"
    directory is never included.

    Raises PathNotFound / NotADirectory for a bad starting path,
    UnreadableFile / UnreadableDirectory when content cannot be read,
    and HashCancelled once `cancel` is set.
    """
    walk = _make_walk(source, ignore, options)
    root = _open_root(walk.source, path)

    logger.info("Tree hash calculation start for %s", root)
    if walk.ignore:
        logger.info("Ignoring patterns: %s", ", ".join(walk.ignore.patterns))

    stack = [_open_frame(walk, root, "", None, [])]

    while True:
        if cancel is not None and cancel.is_set():
            raise HashCancelled(root)

        frame = stack[-1]

        if frame.pending:
            entry = frame.pending.pop()
            child = frame.path / entry.name
            rel = _relative(frame.rel, entry.name)

            if entry.is_directory:
                stack.append(_open_frame(walk, child, rel, entry.name, stack))
            else:
                frame.resolved.append(_resolve_file(walk, child, rel, entry.name))
            continue

        digest = _finish_directory(walk, frame.rel, frame.resolved)
        stack.pop()

        if not stack:
            logger.info("Tree hash calculation end for %s: %s", root, digest.hex())
            return digest.hex()

        stack[-1].resolved.append(
            ResolvedEntry(mode=ModeTag.DIRECTORY, name=frame.name, hash=digest)
        )


# ============================================================
# ASYNC IMPLEMENTATION (sibling fan-out)
# ============================================================

@dataclass
class _Workers:
    limiter: asyncio.Semaphore
    executor: ThreadPoolExecutor


async def _in_thread(workers: _Workers, fn, *args):
    async with workers.limiter:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(workers.executor, fn, *args)


async def _hash_directory_async(walk, workers, path, rel, ancestors) -> bytes:
    if walk.options.symlinks == "follow":
        identity = await _in_thread(workers, _identity, walk, path)
        if identity in ancestors:
            raise UnreadableDirectory(path, "symbolic link cycle")
        ancestors = ancestors | {identity}

    children = await _in_thread(workers, _list_children, walk, path, rel)

    tasks = []
    for entry in children:
        child = path / entry.name
        child_rel = _relative(rel, entry.name)
        if entry.is_directory:
            coro = _hash_subdirectory_async(
                walk, workers, child, child_rel, entry.name, ancestors
            )
        else:
            coro = _in_thread(
                workers, _resolve_file, walk, child, child_rel, entry.name
            )
        tasks.append(asyncio.ensure_future(coro))

    try:
        resolved = await asyncio.gather(*tasks)
    except BaseException:
        # all-or-nothing: a failed or cancelled subtree stops its siblings
        for task in tasks:
            task.cancel()
        # collect the siblings' own failures so none is left unretrieved
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return _finish_directory(walk, rel, resolved)


async def _hash_subdirectory_async(walk, workers, path, rel, name, ancestors):
    digest = await _hash_directory_async(walk, workers, path, rel, ancestors)
    return ResolvedEntry(mode=ModeTag.DIRECTORY, name=name, hash=digest)


async def compute_tree_hash_async(
    path,
    *,
    source: ContentSource | None = None,
    ignore: IgnoreRules | None = None,
    options: WalkOptions | None = None,
    max_workers: int = 8,
    timeout: float | None = None,
) -> str:
    """
    Same result as compute_tree_hash, with sibling subtrees hashed
    concurrently.

    Listing and file reads run in worker threads, at most `max_workers`
    at a time. Every level is joined and sorted before it is encoded, so
    the execution order never leaks into the hash. When `timeout` expires
    the walk is abandoned and HashCancelled is raised right away; a read
    already in progress finishes in its worker thread and is discarded.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    walk = _make_walk(source, ignore, options)
    root = _open_root(walk.source, path)
    workers = _Workers(
        limiter=asyncio.Semaphore(max_workers),
        executor=ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="tree-hash"
        ),
    )

    logger.info(
        "Tree hash calculation start for %s (%d workers)", root, max_workers
    )

    pending = _hash_directory_async(walk, workers, root, "", frozenset())
    try:
        if timeout is None:
            digest = await pending
        else:
            digest = await asyncio.wait_for(pending, timeout)
    except asyncio.TimeoutError:
        raise HashCancelled(root, f"timed out after {timeout}s") from None
    finally:
        workers.executor.shutdown(wait=False, cancel_futures=True)

    logger.info("Tree hash calculation end for %s: %s", root, digest.hex())
    return digest.hex()


# ============================================================
# Merged directories
# ============================================================

def compute_merged_tree_hash(
    paths: Sequence,
    *,
    source: ContentSource | None = None,
    ignore: IgnoreRules | None = None,
    options: WalkOptions | None = None,
    cancel: threading.Event | None = None,
) -> str:
    """
    Hash several directories as if they had been copied on top of each
    other in order, without copying anything. For the same relative
    name a later directory wins, whether it holds a file or a directory.

    Paths that are missing or not directories are skipped with a warning;
    if none is usable the error for the first one is raised.
    """
    if not paths:
        raise ValueError("At least one directory is required")

    source = source or FilesystemSource()
    layers = []
    first_error = None

    for p in paths:
        root = source.normalize(p)
        kind = source.kind(root)
        if kind == KIND_DIR:
            layers.append((source, root))
            continue

        error = PathNotFound(root) if kind is None else NotADirectory(root)
        logger.warning("Skipping layer: %s", error)
        first_error = first_error or error

    if not layers:
        raise first_error

    logger.info("Merged tree hash over %d directories", len(layers))
    for _, root in layers:
        logger.info("  - %s", root)

    return compute_tree_hash(
        ".",
        source=OverlaySource(layers),
        ignore=ignore,
        options=options,
        cancel=cancel,
    )
