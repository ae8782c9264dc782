import logging
import os
from pathlib import Path

import pytest

from Tree_Hash.cli import settings as settings_module


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path_factory, monkeypatch):
    """
    Never read the user's real settings.json during tests.
    """
    missing = tmp_path_factory.mktemp("config") / "settings.json"
    monkeypatch.setattr(settings_module, "SETTINGS_PATH", missing)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """
    The CLI installs a stderr handler bound to the captured stream of
    the test that ran it; drop it afterwards.
    """
    yield
    logger = logging.getLogger("Tree_Hash")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_tree():
    """
    Build a directory tree from nested dicts.

    Values: dict -> directory, bytes/str -> file,
    (content, mode) tuple -> file with explicit permissions.
    """

    def _make(root: Path, layout: dict) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for name, value in layout.items():
            path = root / name
            if isinstance(value, dict):
                _make(path, value)
                continue

            mode = 0o644
            if isinstance(value, tuple):
                value, mode = value
            if isinstance(value, str):
                value = value.encode("utf-8")

            path.write_bytes(value)
            os.chmod(path, mode)
        return root

    return _make
