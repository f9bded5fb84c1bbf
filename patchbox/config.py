"""
Configuration - loads settings from .patchbox.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "root_dir": ".",
    "runtime_file": "runtime.json",
    "host": "127.0.0.1",
    "port": 8787,
    "server_url": "",
    "log_dir": ".patchbox/logs",
    "metrics": True,
    "metrics_dir": "",
    "track_offsets": False,
    "serialize_paths": True,
    "tools_enabled": True,
}

# Config file search locations
_CONFIG_FILENAMES = [".patchbox.yaml", ".patchbox.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .patchbox.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        # Sandbox root used until a runtime file says otherwise
        self.ROOT_DIR = _get("PATCHBOX_ROOT_DIR", "root_dir",
                             _DEFAULTS["root_dir"])
        self.TOOLS_ENABLED = _get_bool("PATCHBOX_TOOLS_ENABLED", "tools_enabled",
                                       _DEFAULTS["tools_enabled"])
        self.RUNTIME_FILE = _get("PATCHBOX_RUNTIME_FILE", "runtime_file",
                                 _DEFAULTS["runtime_file"])

        # HTTP binding
        self.HOST = _get("PATCHBOX_HOST", "host", _DEFAULTS["host"])
        self.PORT = _get("PATCHBOX_PORT", "port", _DEFAULTS["port"], cast=int)
        self.SERVER_URL = _get("PATCHBOX_SERVER_URL", "server_url",
                               _DEFAULTS["server_url"]) or f"http://{self.HOST}:{self.PORT}"

        # Logging and request journal
        self.LOG_DIR = _get("PATCHBOX_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])
        self.METRICS_ENABLED = _get_bool("PATCHBOX_METRICS", "metrics",
                                         _DEFAULTS["metrics"])
        self.METRICS_DIR = _get("PATCHBOX_METRICS_DIR", "metrics_dir",
                                _DEFAULTS["metrics_dir"]) or os.getcwd()

        # Engine behaviour
        self.TRACK_OFFSETS = _get_bool("PATCHBOX_TRACK_OFFSETS", "track_offsets",
                                       _DEFAULTS["track_offsets"])
        self.SERIALIZE_PATHS = _get_bool("PATCHBOX_SERIALIZE_PATHS",
                                         "serialize_paths",
                                         _DEFAULTS["serialize_paths"])

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
