from pathlib import PurePath


EXIT_ERROR = 1
EXIT_USAGE = 2


class TreeHashError(Exception):
    """
    Base class for every failure raised while computing a tree hash.

    Subclasses carry the process exit status the CLI reports for them.
    """
    exit_code = EXIT_ERROR

    def __init__(self, path: PurePath | str, message: str):
        super().__init__(message)
        self.path = path


class PathNotFound(TreeHashError):
    exit_code = 3

    def __init__(self, path):
        super().__init__(
            path, f"Directory {path} does not exist or cannot be accessed"
        )


class NotADirectory(TreeHashError):
    exit_code = 4

    def __init__(self, path):
        super().__init__(path, f"{path} is not a directory")


class UnreadableFile(TreeHashError):
    exit_code = 5

    def __init__(self, path, reason):
        super().__init__(path, f"Cannot read file {path}: {reason}")


class UnreadableDirectory(TreeHashError):
    exit_code = 6

    def __init__(self, path, reason):
        super().__init__(path, f"Cannot list directory {path}: {reason}")


class HashCancelled(TreeHashError):
    exit_code = 7

    def __init__(self, path, reason: str = "cancelled"):
        super().__init__(path, f"Hashing of {path} {reason}")


class PermissionProbeFailed(TreeHashError):
    """
    Permission bits could not be read. Recovered by the mode resolver
    unless strict probing is requested.
    """

    def __init__(self, path, reason):
        super().__init__(path, f"Cannot read permissions of {path}: {reason}")
