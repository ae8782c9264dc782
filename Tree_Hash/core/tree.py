import hashlib
from typing import Sequence

from .models import ResolvedEntry
from .ordering import encode_name, sort_key


EMPTY_TREE_HASH = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

FORBIDDEN_NAMES = {"", ".", ".."}


def tree_header(size: int) -> bytes:
    return b"tree %d\0" % size


def encode_entry(entry: ResolvedEntry, *, git_object_modes: bool = False) -> bytes:
    """
    "<mode> <name>\\0<20 raw hash bytes>"
    """
    if entry.name in FORBIDDEN_NAMES or "/" in entry.name or "\0" in entry.name:
        raise ValueError(f"Invalid tree entry name: {entry.name!r}")

    return (
        entry.mode.encoded(git_object_modes)
        + b" "
        + encode_name(entry.name)
        + b"\0"
        + entry.hash
    )


def _check_order(entries: Sequence[ResolvedEntry]) -> None:
    keys = [sort_key(e.name, e.is_directory) for e in entries]
    for prev, cur in zip(keys, keys[1:]):
        if prev >= cur:
            raise ValueError(
                "Tree entries must be unique and in canonical order "
                f"({prev!r} before {cur!r})"
            )


def encode_tree_body(
    entries: Sequence[ResolvedEntry],
    *,
    git_object_modes: bool = False,
) -> bytes:
    _check_order(entries)
    return b"".join(
        encode_entry(e, git_object_modes=git_object_modes) for e in entries
    )


def encode_tree(
    entries: Sequence[ResolvedEntry],
    *,
    git_object_modes: bool = False,
) -> bytes:
    """
    Full tree object: "tree <body length>\\0" followed by every entry,
    in the order given. Entries must already be sorted.
    """
    body = encode_tree_body(entries, git_object_modes=git_object_modes)
    return tree_header(len(body)) + body


def hash_tree(
    entries: Sequence[ResolvedEntry],
    *,
    git_object_modes: bool = False,
) -> bytes:
    return hashlib.sha1(
        encode_tree(entries, git_object_modes=git_object_modes)
    ).digest()
