"""
Configuration — loads settings from .udiff_writer.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "dedupe_on_resync": True,
    "update_interval_ms": 8,
    "syntax_check": True,
    "metrics": True,
    "review_ui": "console",
    "log_dir": ".udiff_writer/logs",
    "omission_extra_phrases": [],
}

REVIEW_UIS = ("textual", "console", "auto")

# Config file search locations
_CONFIG_FILENAMES = [".udiff_writer.yaml", ".udiff_writer.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
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
    3. .udiff_writer.yaml config file
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

        self.DEDUPE_ON_RESYNC = _get_bool("UDIFF_DEDUPE_ON_RESYNC",
                                          "dedupe_on_resync",
                                          _DEFAULTS["dedupe_on_resync"])
        self.UPDATE_INTERVAL_MS = _get("UDIFF_UPDATE_INTERVAL_MS",
                                       "update_interval_ms",
                                       _DEFAULTS["update_interval_ms"], cast=int)
        self.SYNTAX_CHECK = _get_bool("UDIFF_SYNTAX_CHECK", "syntax_check",
                                      _DEFAULTS["syntax_check"])
        self.METRICS = _get_bool("UDIFF_METRICS", "metrics",
                                 _DEFAULTS["metrics"])
        self.LOG_DIR = _get("UDIFF_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])

        self.REVIEW_UI = _get("UDIFF_REVIEW_UI", "review_ui",
                              _DEFAULTS["review_ui"]).lower()
        if self.REVIEW_UI not in REVIEW_UIS:
            self.REVIEW_UI = _DEFAULTS["review_ui"]

        # Extra omission phrases, appended to the built-in vocabulary
        omission_section = yd.get("omission", {})
        extra = []
        if isinstance(omission_section, dict):
            extra = omission_section.get("extra_phrases", [])
        self.OMISSION_EXTRA_PHRASES: list[str] = (
            [str(p) for p in extra] if isinstance(extra, list)
            else list(_DEFAULTS["omission_extra_phrases"])
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
