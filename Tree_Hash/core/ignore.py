from typing import List

import pathspec


# ============================================================
# Ignore rules
# ============================================================

class IgnoreRules:
    """
    Glob patterns that exclude entries from the hash, with .gitignore
    wildmatch semantics.

    "*" never crosses a "/" and "**/" also matches zero directories.
    A pattern without a slash matches a name at any depth, so
    "node_modules" drops that directory everywhere, while "build/*.o"
    only matches object files directly inside a top-level build.
    A trailing "/" restricts a pattern to directories. Dotfiles are
    matched like any other name.
    """

    def __init__(self, patterns: List[str] | None = None):
        self.patterns = list(patterns or [])
        self.matcher = pathspec.PathSpec.from_lines(
            pathspec.patterns.GitWildMatchPattern,
            self.patterns,
        )

    def __bool__(self):
        return bool(self.patterns)

    def should_ignore(self, relative_path: str, is_directory: bool = False) -> bool:
        path = relative_path.replace("\\", "/").strip("/")
        if not path or not self.patterns:
            return False

        if is_directory:
            path += "/"
        return self.matcher.match_file(path)
