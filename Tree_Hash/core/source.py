import errno
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath
from typing import Dict, Iterator, List, Sequence, Union

from .models import CHUNK_SIZE, DirectoryEntry


logger = logging.getLogger(__name__)

KIND_DIR = "dir"
KIND_FILE = "file"
KIND_OTHER = "other"


# ============================================================
# Interface
# ============================================================

class ContentSource:
    """
    Read-only view of a directory tree.

    The walker performs every read through one of these, so the hashing
    algorithm can run against the live filesystem, an in-memory fixture,
    or several directories layered on top of each other.

    All methods raise OSError (or a subclass) when the underlying entry
    is missing or unreadable.
    """

    def normalize(self, path) -> PurePath:
        raise NotImplementedError

    def kind(self, path: PurePath) -> str | None:
        """
        Return KIND_DIR, KIND_FILE, KIND_OTHER, or None if nothing exists
        at path. Symbolic links are followed.
        """
        raise NotImplementedError

    def list_dir(self, path: PurePath) -> List[DirectoryEntry]:
        raise NotImplementedError

    def permissions(self, path: PurePath) -> int:
        raise NotImplementedError

    def size(self, path: PurePath) -> int:
        raise NotImplementedError

    def read_chunks(
        self,
        path: PurePath,
        chunk_size: int = CHUNK_SIZE,
    ) -> Iterator[bytes]:
        raise NotImplementedError

    def identity(self, path: PurePath):
        """
        Hashable key identifying the directory at path, used to detect
        cycles when symbolic links are followed.
        """
        raise NotImplementedError


# ============================================================
# Live filesystem
# ============================================================

class FilesystemSource(ContentSource):

    def normalize(self, path) -> Path:
        return Path(os.path.abspath(os.fspath(path)))

    def kind(self, path):
        try:
            st = os.stat(path)
        except OSError:
            return None
        if stat.S_ISDIR(st.st_mode):
            return KIND_DIR
        if stat.S_ISREG(st.st_mode):
            return KIND_FILE
        return KIND_OTHER

    def list_dir(self, path):
        entries = []
        with os.scandir(path) as it:
            for entry in it:
                is_link = entry.is_symlink()
                try:
                    is_dir = entry.is_dir()
                    is_file = entry.is_file()
                except OSError:
                    is_dir = is_file = False

                if not (is_dir or is_file):
                    # Dangling links stay in the listing so that following
                    # them fails loudly instead of dropping content.
                    if not is_link or os.path.exists(entry.path):
                        logger.debug("Skipping special file: %s", entry.path)
                        continue

                entries.append(
                    DirectoryEntry(
                        name=entry.name,
                        is_directory=is_dir,
                        is_symlink=is_link,
                    )
                )
        return entries

    def permissions(self, path):
        return os.stat(path).st_mode

    def size(self, path):
        return os.stat(path).st_size

    def read_chunks(self, path, chunk_size=CHUNK_SIZE):
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                yield chunk

    def identity(self, path):
        st = os.stat(path)
        return (st.st_dev, st.st_ino)


# ============================================================
# In-memory fixture tree
# ============================================================

@dataclass(frozen=True)
class MemoryFile:
    content: bytes = b""
    mode: int = 0o100644


MemoryNode = Union[bytes, MemoryFile, Dict[str, "MemoryNode"]]


class MemorySource(ContentSource):
    """
    A directory tree held in nested dicts.

    Dict values are subdirectories; bytes or MemoryFile values are files.

        MemorySource({
            "a.txt": b"hello\\n",
            "bin": {"run": MemoryFile(b"#!/bin/sh\\n", mode=0o100755)},
        })
    """

    def __init__(self, tree: Dict[str, MemoryNode]):
        self.tree = tree

    def normalize(self, path) -> PurePosixPath:
        return PurePosixPath(path)

    def _lookup(self, path) -> MemoryNode:
        node = self.tree
        for part in PurePosixPath(path).parts:
            if part == "/":
                continue
            if not isinstance(node, dict) or part not in node:
                raise FileNotFoundError(
                    errno.ENOENT, os.strerror(errno.ENOENT), str(path)
                )
            node = node[part]
        return node

    def _file(self, path) -> MemoryFile:
        node = self._lookup(path)
        if isinstance(node, dict):
            raise IsADirectoryError(
                errno.EISDIR, os.strerror(errno.EISDIR), str(path)
            )
        if isinstance(node, MemoryFile):
            return node
        return MemoryFile(content=node)

    def kind(self, path):
        try:
            node = self._lookup(path)
        except OSError:
            return None
        return KIND_DIR if isinstance(node, dict) else KIND_FILE

    def list_dir(self, path):
        node = self._lookup(path)
        if not isinstance(node, dict):
            raise NotADirectoryError(
                errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(path)
            )
        return [
            DirectoryEntry(name=name, is_directory=isinstance(child, dict))
            for name, child in node.items()
        ]

    def permissions(self, path):
        node = self._lookup(path)
        if isinstance(node, dict):
            return 0o040755
        return self._file(path).mode

    def size(self, path):
        return len(self._file(path).content)

    def read_chunks(self, path, chunk_size=CHUNK_SIZE):
        content = self._file(path).content
        for start in range(0, len(content), chunk_size):
            yield content[start:start + chunk_size]

    def identity(self, path):
        return id(self._lookup(path))


# ============================================================
# Layered directories
# ============================================================

class OverlaySource(ContentSource):
    """
    Several directories viewed as one. Paths are relative to every layer;
    for the same name a later layer overrides an earlier one.
    """

    def __init__(self, layers: Sequence[tuple]):
        # (source, root) pairs, earliest first
        self.layers = list(layers)

    @classmethod
    def from_paths(cls, paths: Sequence) -> "OverlaySource":
        fs = FilesystemSource()
        return cls([(fs, fs.normalize(p)) for p in paths])

    def normalize(self, path) -> PurePosixPath:
        return PurePosixPath(path)

    def _locate(self, path):
        for source, root in reversed(self.layers):
            full = root / path
            if source.kind(full) is not None:
                return source, full
        raise FileNotFoundError(
            errno.ENOENT, os.strerror(errno.ENOENT), str(path)
        )

    def kind(self, path):
        kinds = [source.kind(root / path) for source, root in self.layers]
        if KIND_DIR in kinds:
            return KIND_DIR
        for kind in reversed(kinds):
            if kind is not None:
                return kind
        return None

    def list_dir(self, path):
        merged: Dict[str, DirectoryEntry] = {}
        found = False
        for source, root in self.layers:
            full = root / path
            if source.kind(full) != KIND_DIR:
                continue
            found = True
            for entry in source.list_dir(full):
                merged[entry.name] = entry
        if not found:
            raise FileNotFoundError(
                errno.ENOENT, os.strerror(errno.ENOENT), str(path)
            )
        return list(merged.values())

    def permissions(self, path):
        source, full = self._locate(path)
        return source.permissions(full)

    def size(self, path):
        source, full = self._locate(path)
        return source.size(full)

    def read_chunks(self, path, chunk_size=CHUNK_SIZE):
        source, full = self._locate(path)
        return source.read_chunks(full, chunk_size)

    def identity(self, path):
        # a merged directory is identified by its layered position
        return tuple(
            source.identity(root / path)
            for source, root in self.layers
            if source.kind(root / path) == KIND_DIR
        )
