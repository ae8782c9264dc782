import json
from pathlib import Path
from typing import Any, Dict

from platformdirs import user_config_dir

from Tree_Hash.core.models import SYMLINK_POLICIES, WalkOptions


# ----------------------------
# Settings
# ----------------------------

APP_NAME = "tree_hash"
SETTINGS_FILENAME = "settings.json"
SETTINGS_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / SETTINGS_FILENAME

DEFAULT_SETTINGS = {
    "hashing": {
        "honor_executable_bit": True,
        "git_object_modes": False,
        "symlinks": "skip",
        "strict_permission_probe": False,
    },
    "walk": {
        "ignore_patterns": [],
        "max_workers": 1,
        "timeout_seconds": None,
    },
    "logging": {"level": "WARNING"},
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def load_settings(settings_path=None) -> Dict[str, Any]:
    """
    Load settings.json and merge it over DEFAULT_SETTINGS.

    Without an explicit path a missing file simply means defaults.
    An explicit path that does not exist, malformed JSON, or invalid
    values raise ValueError.
    """
    path = Path(settings_path) if settings_path else SETTINGS_PATH

    merged = json.loads(json.dumps(DEFAULT_SETTINGS))

    if not path.exists():
        if settings_path:
            raise ValueError(f"Settings file not found: {path}")
        return merged

    try:
        with open(path, "r", encoding="utf-8") as f:
            user_settings = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid settings file {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read settings file {path}: {e.strerror or e}") from e

    if not isinstance(user_settings, dict):
        raise ValueError(f"Invalid settings file {path}: expected a JSON object")

    for k, v in user_settings.items():
        if isinstance(v, dict) and k in merged:
            merged[k].update(v)
        else:
            merged[k] = v

    validate_settings(merged)
    return merged


def validate_settings(settings: Dict[str, Any]) -> None:
    for section in DEFAULT_SETTINGS:
        if not isinstance(settings.get(section), dict):
            raise ValueError(f"{section} must be a JSON object")

    hashing = settings["hashing"]
    walk = settings["walk"]

    for key in ("honor_executable_bit", "git_object_modes", "strict_permission_probe"):
        if not isinstance(hashing.get(key), bool):
            raise ValueError(f"hashing.{key} must be true or false")

    if hashing.get("symlinks") not in SYMLINK_POLICIES:
        raise ValueError(
            f"hashing.symlinks must be one of: {', '.join(SYMLINK_POLICIES)}"
        )

    patterns = walk.get("ignore_patterns")
    if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
        raise ValueError("walk.ignore_patterns must be a list of strings")

    workers = walk.get("max_workers")
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValueError("walk.max_workers must be a positive integer")

    timeout = walk.get("timeout_seconds")
    if timeout is not None and (
        isinstance(timeout, bool)
        or not isinstance(timeout, (int, float))
        or timeout <= 0
    ):
        raise ValueError("walk.timeout_seconds must be a positive number or null")

    if str(settings["logging"].get("level", "")).upper() not in LOG_LEVELS:
        raise ValueError(f"logging.level must be one of: {', '.join(LOG_LEVELS)}")


def walk_options_from_settings(settings: Dict[str, Any]) -> WalkOptions:
    hashing = settings["hashing"]
    return WalkOptions(
        honor_executable_bit=hashing["honor_executable_bit"],
        git_object_modes=hashing["git_object_modes"],
        symlinks=hashing["symlinks"],
        strict_permission_probe=hashing["strict_permission_probe"],
    )
