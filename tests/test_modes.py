import logging
import os
from pathlib import Path

import pytest

from Tree_Hash.core.errors import PermissionProbeFailed
from Tree_Hash.core.models import ModeTag, WalkOptions
from Tree_Hash.core.modes import resolve_mode
from Tree_Hash.core.source import FilesystemSource, MemoryFile, MemorySource


# ----------------------------
# Helpers
# ----------------------------

class VanishingSource(MemorySource):
    def permissions(self, path):
        raise FileNotFoundError(2, "No such file or directory", str(path))


def file_with_mode(tmp_path: Path, mode: int) -> Path:
    f = tmp_path / f"file_{mode:o}"
    f.write_text("x")
    os.chmod(f, mode)
    return f


# ----------------------------
# Tests
# ----------------------------

@pytest.mark.parametrize(
    "mode, expected",
    [
        (0o644, ModeTag.REGULAR_FILE),
        (0o600, ModeTag.REGULAR_FILE),
        (0o755, ModeTag.EXECUTABLE_FILE),
        (0o744, ModeTag.EXECUTABLE_FILE),  # owner only
        (0o654, ModeTag.EXECUTABLE_FILE),  # group only
        (0o645, ModeTag.EXECUTABLE_FILE),  # other only
    ],
)
def test_execute_bits(tmp_path: Path, mode, expected):
    f = file_with_mode(tmp_path, mode)

    assert resolve_mode(FilesystemSource(), f) is expected


def test_memory_file_modes():
    source = MemorySource({
        "plain": b"a",
        "tool": MemoryFile(b"b", mode=0o100755),
    })

    assert resolve_mode(source, source.normalize("plain")) is ModeTag.REGULAR_FILE
    assert resolve_mode(source, source.normalize("tool")) is ModeTag.EXECUTABLE_FILE


def test_executable_bit_can_be_ignored(tmp_path: Path):
    f = file_with_mode(tmp_path, 0o755)
    options = WalkOptions(honor_executable_bit=False)

    assert resolve_mode(FilesystemSource(), f, options) is ModeTag.REGULAR_FILE


def test_failed_probe_falls_back_to_regular(caplog):
    source = VanishingSource({"gone": b"x"})

    with caplog.at_level(logging.WARNING, logger="Tree_Hash.core.modes"):
        mode = resolve_mode(source, source.normalize("gone"))

    assert mode is ModeTag.REGULAR_FILE
    assert "Cannot read permissions of gone" in caplog.text


def test_failed_probe_is_fatal_when_strict():
    source = VanishingSource({"gone": b"x"})
    options = WalkOptions(strict_permission_probe=True)

    with pytest.raises(PermissionProbeFailed):
        resolve_mode(source, source.normalize("gone"), options)
