"""
Configuration — loads settings from .change_review.yaml, environment
variables, and built-in defaults (in that priority order: CLI args > env >
YAML > defaults).
"""

import os

import yaml

from .editing.summary import RiskThresholds

_DEFAULTS = {
    "context_lines": 3,
    "watch_debounce_seconds": 0.5,
    "log_dir": ".change_review/logs",
    "color": True,
    "risk": {
        "medium_files": 5,
        "high_files": 10,
        "medium_lines": 200,
        "high_lines": 500,
    },
}

# Config file search locations
_CONFIG_FILENAMES = [".change_review.yaml", ".change_review.yml"]


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
    3. .change_review.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, section: dict, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = section.get(yaml_key)
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

        self.CONTEXT_LINES = _get("REVIEW_CONTEXT_LINES", yd, "context_lines",
                                  _DEFAULTS["context_lines"], cast=int)
        if self.CONTEXT_LINES < 0:
            self.CONTEXT_LINES = _DEFAULTS["context_lines"]

        self.WATCH_DEBOUNCE_SECONDS = _get(
            "REVIEW_WATCH_DEBOUNCE", yd, "watch_debounce_seconds",
            _DEFAULTS["watch_debounce_seconds"], cast=float)
        self.LOG_DIR = _get("REVIEW_LOG_DIR", yd, "log_dir", _DEFAULTS["log_dir"])
        self.COLOR = _get_bool("REVIEW_COLOR", "color", _DEFAULTS["color"])

        # Risk thresholds
        risk_section = yd.get("risk", {}) if isinstance(yd.get("risk"), dict) else {}
        risk_defaults = _DEFAULTS["risk"]
        self.RISK_THRESHOLDS = RiskThresholds(
            medium_files=_get("REVIEW_RISK_MEDIUM_FILES", risk_section,
                              "medium_files", risk_defaults["medium_files"], cast=int),
            high_files=_get("REVIEW_RISK_HIGH_FILES", risk_section,
                            "high_files", risk_defaults["high_files"], cast=int),
            medium_lines=_get("REVIEW_RISK_MEDIUM_LINES", risk_section,
                              "medium_lines", risk_defaults["medium_lines"], cast=int),
            high_lines=_get("REVIEW_RISK_HIGH_LINES", risk_section,
                            "high_lines", risk_defaults["high_lines"], cast=int),
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
