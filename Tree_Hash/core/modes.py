import logging
from pathlib import PurePath

from .errors import PermissionProbeFailed
from .models import ModeTag, WalkOptions
from .source import ContentSource


logger = logging.getLogger(__name__)

EXECUTE_BITS = 0o111  # owner, group, other


def probe_permissions(source: ContentSource, path: PurePath) -> int:
    try:
        return source.permissions(path)
    except OSError as e:
        raise PermissionProbeFailed(path, e.strerror or e) from e


def resolve_mode(
    source: ContentSource,
    path: PurePath,
    options: WalkOptions | None = None,
) -> ModeTag:
    """
    Classify a regular file as 100644 or 100755 from its permission bits.

    A failed probe never stops the traversal: the file is treated as
    non-executable and a warning is logged. With strict_permission_probe
    the PermissionProbeFailed is raised instead.
    """
    options = options or WalkOptions()

    if not options.honor_executable_bit:
        return ModeTag.REGULAR_FILE

    try:
        mode = probe_permissions(source, path)
    except PermissionProbeFailed as e:
        if options.strict_permission_probe:
            raise
        logger.warning("%s; using mode %s", e, ModeTag.REGULAR_FILE.value)
        return ModeTag.REGULAR_FILE

    if mode & EXECUTE_BITS:
        return ModeTag.EXECUTABLE_FILE
    return ModeTag.REGULAR_FILE
