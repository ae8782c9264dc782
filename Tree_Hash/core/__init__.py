# Auto-generated __init__.py

from . import blob
from .blob import blob_header
from .blob import hash_blob
from .blob import hash_blob_bytes
from . import errors
from .errors import HashCancelled
from .errors import NotADirectory
from .errors import PathNotFound
from .errors import PermissionProbeFailed
from .errors import TreeHashError
from .errors import UnreadableDirectory
from .errors import UnreadableFile
from . import ignore
from .ignore import IgnoreRules
from . import models
from .models import DirectoryEntry
from .models import ModeTag
from .models import ResolvedEntry
from .models import WalkOptions
from . import modes
from .modes import resolve_mode
from . import ordering
from .ordering import compare_bytes
from .ordering import compare_entries
from .ordering import sort_entries
from .ordering import sort_key
from . import source
from .source import ContentSource
from .source import FilesystemSource
from .source import MemoryFile
from .source import MemorySource
from .source import OverlaySource
from . import tree
from .tree import EMPTY_TREE_HASH
from .tree import encode_tree
from .tree import hash_tree
from . import walker
from .walker import METADATA_DIR_NAME
from .walker import compute_merged_tree_hash
from .walker import compute_tree_hash
from .walker import compute_tree_hash_async

__all__ = [
    "blob",
    "errors",
    "ignore",
    "models",
    "modes",
    "ordering",
    "source",
    "tree",
    "walker",
    "EMPTY_TREE_HASH",
    "METADATA_DIR_NAME",
    "ContentSource",
    "DirectoryEntry",
    "FilesystemSource",
    "HashCancelled",
    "IgnoreRules",
    "MemoryFile",
    "MemorySource",
    "ModeTag",
    "NotADirectory",
    "OverlaySource",
    "PathNotFound",
    "PermissionProbeFailed",
    "ResolvedEntry",
    "TreeHashError",
    "UnreadableDirectory",
    "UnreadableFile",
    "WalkOptions",
    "blob_header",
    "compare_bytes",
    "compare_entries",
    "compute_merged_tree_hash",
    "compute_tree_hash",
    "compute_tree_hash_async",
    "encode_tree",
    "hash_blob",
    "hash_blob_bytes",
    "hash_tree",
    "resolve_mode",
    "sort_entries",
    "sort_key",
]
