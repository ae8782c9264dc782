from dataclasses import dataclass
from enum import Enum


DIGEST_SIZE = 20          # SHA-1
CHUNK_SIZE = 1024 * 1024  # streaming read size for blobs

SYMLINK_POLICIES = ("skip", "follow")


class ModeTag(Enum):
    """
    Mode of a tree entry, stored as the fixed octal string written
    into tree objects.
    """
    REGULAR_FILE = "100644"
    EXECUTABLE_FILE = "100755"
    DIRECTORY = "040000"

    def encoded(self, git_object_modes: bool = False) -> bytes:
        # git itself drops the leading zero of directory modes
        if git_object_modes and self is ModeTag.DIRECTORY:
            return b"40000"
        return self.value.encode("ascii")


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One child seen while listing a directory. Never persisted.
    """
    name: str
    is_directory: bool
    is_symlink: bool = False


@dataclass(frozen=True)
class ResolvedEntry:
    """
    A directory child annotated with its mode and raw 20-byte object hash.
    """
    mode: ModeTag
    name: str
    hash: bytes

    def __post_init__(self):
        if len(self.hash) != DIGEST_SIZE:
            raise ValueError(
                f"Entry {self.name!r} has a {len(self.hash)}-byte hash, "
                f"expected {DIGEST_SIZE}"
            )

    @property
    def is_directory(self) -> bool:
        return self.mode is ModeTag.DIRECTORY

    @property
    def hex(self) -> str:
        return self.hash.hex()


@dataclass(frozen=True)
class WalkOptions:
    """
    Knobs for a single traversal.

    The defaults give the canonical behavior:
    - executable bits decide between 100644 and 100755
    - directories are written with the 6-character mode 040000
    - symbolic links are left out of the tree
    - an unreadable permission probe falls back to 100644
    """
    honor_executable_bit: bool = True
    git_object_modes: bool = False
    symlinks: str = "skip"
    strict_permission_probe: bool = False
    chunk_size: int = CHUNK_SIZE

    def __post_init__(self):
        if self.symlinks not in SYMLINK_POLICIES:
            raise ValueError(
                f"Unknown symlink policy {self.symlinks!r} "
                f"(expected one of {', '.join(SYMLINK_POLICIES)})"
            )
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
