import hashlib
from pathlib import PurePath

from .errors import UnreadableFile
from .models import CHUNK_SIZE
from .source import ContentSource


def blob_header(size: int) -> bytes:
    return b"blob %d\0" % size


def hash_blob_bytes(data: bytes) -> bytes:
    """
    Raw SHA-1 of the blob object for an in-memory buffer.
    """
    h = hashlib.sha1(blob_header(len(data)))
    h.update(data)
    return h.digest()


def hash_blob(
    source: ContentSource,
    path: PurePath,
    *,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """
    Hash a file as a blob object: "blob <size>\\0<content>".

    The size goes into the header before any content is read, so the
    content is streamed in chunks instead of loaded whole. If the number
    of bytes read disagrees with that size the file changed underneath
    us and the digest would be wrong, so that is an error too.
    """
    try:
        size = source.size(path)
        h = hashlib.sha1(blob_header(size))
        read = 0
        for chunk in source.read_chunks(path, chunk_size):
            h.update(chunk)
            read += len(chunk)
    except OSError as e:
        raise UnreadableFile(path, e.strerror or e) from e

    if read != size:
        raise UnreadableFile(
            path, f"size changed while reading ({size} -> {read} bytes)"
        )

    return h.digest()
