"""Centralized configuration for Gymless.

Settings are resolved from, lowest to highest priority:
1. Defaults declared on ``Settings``
2. YAML config file (``gymless.yaml``)
3. ``.env`` file
4. ``GYMLESS_*`` environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from ..rollups.trends import DEFAULT_THRESHOLD, TrendThresholds

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
    "load_yaml_config",
]

STORE_BACKENDS = ("json", "memory", "http")
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> settings field
ENV_VARS = {
    "GYMLESS_STORE_BACKEND": "store_backend",
    "GYMLESS_DATA_PATH": "data_path",
    "GYMLESS_API_BASE_URL": "api_base_url",
    "GYMLESS_API_TIMEOUT": "api_timeout",
    "GYMLESS_API_TOKEN": "api_token",
    "GYMLESS_TREND_THRESHOLD": "trend_threshold",
    "GYMLESS_DEFAULT_TZ": "default_timezone",
    "GYMLESS_LOG_LEVEL": "log_level",
    "GYMLESS_LOG_DIR": "log_dir",
}


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


@dataclass
class Settings:
    """Settings for the Gymless analytics tools.

    Attributes
    ----------
    store_backend : str
        Daily record store: json, memory or http
    data_path : Path
        JSON data file (json backend)
    api_base_url : str | None
        Backend base URL (http backend)
    api_timeout : float
        HTTP timeout in seconds
    api_token : str | None
        Optional bearer token for the backend
    trend_threshold : float
        Relative change needed to leave "stable" (0.02 = 2%)
    default_timezone : str
        IANA timezone used to resolve "today"
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSONL logs (console only if not set)
    """

    store_backend: str = "json"
    data_path: Path = Path("data/daily_stats.json")
    api_base_url: str | None = None
    api_timeout: float = 10.0
    api_token: str | None = None
    trend_threshold: float = DEFAULT_THRESHOLD
    default_timezone: str = "UTC"
    log_level: str = "INFO"
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if isinstance(self.data_path, str):
            self.data_path = Path(self.data_path)
        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        self.store_backend = str(self.store_backend).lower()
        self.log_level = str(self.log_level).upper()

        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(
                f"Unknown store backend {self.store_backend!r}. "
                f"Set GYMLESS_STORE_BACKEND to one of: {', '.join(STORE_BACKENDS)}"
            )

        if self.store_backend == "http" and not self.api_base_url:
            raise ConfigError(
                "GYMLESS_API_BASE_URL is required when GYMLESS_STORE_BACKEND=http. "
                "Set it in .env (e.g., GYMLESS_API_BASE_URL=https://api.example.com/v1)"
            )

        if self.api_timeout <= 0:
            raise ConfigError(f"GYMLESS_API_TIMEOUT must be positive, got {self.api_timeout}")

        if not 0 <= self.trend_threshold < 1:
            raise ConfigError(
                f"GYMLESS_TREND_THRESHOLD must be a fraction in [0, 1), got {self.trend_threshold}"
            )

        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Invalid log level {self.log_level!r}. Options: {', '.join(LOG_LEVELS)}")

        try:
            ZoneInfo(self.default_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Invalid timezone in GYMLESS_DEFAULT_TZ: {self.default_timezone!r}") from exc

    def trend_thresholds(self) -> TrendThresholds:
        """Trend thresholds derived from ``trend_threshold``."""
        return TrendThresholds.uniform(self.trend_threshold)

    @classmethod
    def from_env(
        cls,
        env_file: Path | str | None = None,
        config_file: Path | str | None = None,
    ) -> Settings:
        """Load settings from YAML config, .env and environment.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)
        config_file
            Path to YAML config (default: gymless.yaml in current directory)

        Raises
        ------
        ConfigError
            If settings are invalid
        """
        values: dict[str, Any] = load_yaml_config(Path(config_file or "gymless.yaml"))

        env_path = Path(env_file or ".env")
        if env_path.exists():
            load_env_file(env_path)

        for env_name, field_name in ENV_VARS.items():
            if env_name in os.environ:
                values[field_name] = os.environ[env_name]

        try:
            if "api_timeout" in values:
                values["api_timeout"] = float(values["api_timeout"])
            if "trend_threshold" in values:
                values["trend_threshold"] = float(values["trend_threshold"])
            return cls(**values)
        except (ValueError, TypeError) as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load settings overrides from a YAML file.

    Missing file yields no overrides. Unknown keys are rejected.

    Raises
    ------
    ConfigError
        If the file is not valid YAML or holds unknown keys
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of settings")

    known = set(ENV_VARS.values())
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings in {path}: {', '.join(unknown)}")

    return data


def load_env_file(env_file: Path) -> None:
    """Export ``KEY=value`` lines of a .env file into ``os.environ``.

    Blank lines, ``#`` comments and lines without ``=`` are skipped; one pair
    of matching quotes around a value is removed. Variables already present in
    the environment are kept.
    """
    for raw in env_file.read_text(encoding="utf-8").splitlines():
        entry = raw.strip()
        if not entry or entry.startswith("#"):
            continue

        key, sep, value = entry.partition("=")
        if not sep:
            continue

        os.environ.setdefault(key.strip(), _unquote(value.strip()))


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None, config_file: Path | str | None = None) -> Settings:
    """Load settings and keep them as the process-wide instance."""
    global _settings
    _settings = Settings.from_env(env_file, config_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings.

    Raises
    ------
    ConfigError
        If settings not loaded
    """
    if _settings is None:
        raise ConfigError("Settings not loaded. Call load_settings() first.")
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings.

    Parameters
    ----------
    output_path
        Optional path to write .env file
    """
    example = """# Gymless analytics configuration
# Copy this to .env and adjust values

# Daily record store: json, memory or http (default: json)
GYMLESS_STORE_BACKEND=json

# JSON data file (json backend)
GYMLESS_DATA_PATH=data/daily_stats.json

# App backend (http backend)
# GYMLESS_API_BASE_URL=https://api.example.com/v1
# GYMLESS_API_TOKEN=
GYMLESS_API_TIMEOUT=10

# Relative change that counts as a trend (0.02 = 2%)
GYMLESS_TREND_THRESHOLD=0.02

# Timezone used for "today" (IANA name)
GYMLESS_DEFAULT_TZ=UTC

# Logging: DEBUG, INFO, WARNING, ERROR, CRITICAL
GYMLESS_LOG_LEVEL=INFO
# GYMLESS_LOG_DIR=logs
"""

    if output_path:
        output_path.write_text(example)

    return example
