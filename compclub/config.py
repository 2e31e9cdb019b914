# config.py
import os
import sys
import time
import copy
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = "config.yml"

# --- Default Configuration, will be overridden by config.yml ---
DEFAULT_CONFIG: Dict[str, Any] = {
    "debug": False,
    "tmp_dir": "tmp",
    "judge": {
        "rounds": 10,
        "timeout": 5.0,
        "cleanup": True,
    },
    "gen": {
        "min_tables": 1,
        "max_tables": 5,
        "events": 40,
        "clients": 8,
        "max_rate": 100,
    },
}

ENABLE_DETAILED_DEBUG = False


def set_debug(enabled: bool):
    global ENABLE_DETAILED_DEBUG
    ENABLE_DETAILED_DEBUG = bool(enabled)


def debug_print(*args, **kwargs):
    if ENABLE_DETAILED_DEBUG:
        print(f"DEBUG [{time.time():.4f}]:", *args, **kwargs, file=sys.stderr, flush=True)


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Read config.yml and merge it over the defaults.

    A missing file means defaults. An unreadable or malformed file prints a
    warning and also falls back to defaults, so the replay itself never
    depends on the tooling configuration.
    """
    if not os.path.exists(config_path):
        debug_print(f"No config file at '{config_path}', using defaults.")
        return copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"WARNING: Failed to read config file '{config_path}': {e}", file=sys.stderr)
        print("WARNING: Using default settings", file=sys.stderr)
        return copy.deepcopy(DEFAULT_CONFIG)
    if loaded is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(loaded, dict):
        print(f"WARNING: Config file '{config_path}' must be a YAML mapping, using defaults.", file=sys.stderr)
        return copy.deepcopy(DEFAULT_CONFIG)
    return _merge(DEFAULT_CONFIG, loaded)
