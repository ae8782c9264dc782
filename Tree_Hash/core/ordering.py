from functools import cmp_to_key
from typing import Iterable, List


PATH_SEPARATOR = b"/"


def encode_name(name: str) -> bytes:
    # surrogateescape gives back the exact on-disk bytes of names that
    # are not valid UTF-8
    return name.encode("utf-8", "surrogateescape")


def sort_key(name: str, is_directory: bool) -> bytes:
    """
    Directories compare as if their name ended in "/".
    """
    raw = encode_name(name)
    return raw + PATH_SEPARATOR if is_directory else raw


def compare_bytes(a: bytes, b: bytes) -> int:
    """
    Byte-by-byte comparison: the first differing byte decides,
    otherwise the shorter sequence sorts first.
    """
    for x, y in zip(a, b):
        if x != y:
            return x - y
    return len(a) - len(b)


def compare_entries(a, b) -> int:
    """
    Order two entries (anything with .name and .is_directory) the way
    tree objects require.
    """
    return compare_bytes(
        sort_key(a.name, a.is_directory),
        sort_key(b.name, b.is_directory),
    )


def sort_entries(entries: Iterable) -> List:
    return sorted(entries, key=cmp_to_key(compare_entries))
