# Auto-generated __init__.py

from . import hash_tree
from .hash_tree import build_parser
from .hash_tree import main
from . import logging_setup
from .logging_setup import setup_logging
from . import settings
from .settings import DEFAULT_SETTINGS
from .settings import load_settings
from .settings import walk_options_from_settings

__all__ = [
    "hash_tree",
    "logging_setup",
    "settings",
    "DEFAULT_SETTINGS",
    "build_parser",
    "load_settings",
    "main",
    "setup_logging",
    "walk_options_from_settings",
]
