"""
Configuration Management for RLSight

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables

Configuration precedence (highest to lowest):
1. Explicit overrides passed to load_config()
2. Environment variables (RLSIGHT_*)
3. Configuration file
4. Default values
"""

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rlsight.core.constants import (
    BOOST_MAX,
    HEIGHT_BOUNDS,
    KICKOFF_TIME_DELAY,
    OPENING_KICKOFF_SECOND,
    OVERTIME_KICKOFF_SECOND,
    POINTS_WEIGHTS,
    ZONE_THRESHOLD,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class AnalysisConfig:
    """Thresholds and constants used by the analytics engine."""

    # Field zones: beyond +/- this longitudinal distance is a team's zone
    zone_threshold: float = ZONE_THRESHOLD

    # Cumulative altitude buckets (low, medium, high)
    height_bounds: tuple[float, float, float] = HEIGHT_BOUNDS

    # Kickoff checks
    kickoff_time_delay: int = KICKOFF_TIME_DELAY
    opening_kickoff_second: int = OPENING_KICKOFF_SECOND
    overtime_kickoff_second: int = OVERTIME_KICKOFF_SECOND

    # Resource readings above this are a data integrity failure
    boost_max: int = BOOST_MAX

    points_weights: dict[str, int] = field(default_factory=lambda: dict(POINTS_WEIGHTS))


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class RLSightConfig:
    """Main configuration container."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "rlsight.yaml")
    paths.append(Path.cwd() / "rlsight.toml")
    paths.append(Path.cwd() / "rlsight.json")

    # User home directory
    home = Path.home()
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "rlsight" / "config.yaml")
    paths.append(home / ".rlsight.yaml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    import yaml

    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        "RLSIGHT_LOG_LEVEL": ("logging", "level"),
        "RLSIGHT_LOG_FILE": ("logging", "file"),
        "RLSIGHT_ZONE_THRESHOLD": ("analysis", "zone_threshold"),
        "RLSIGHT_KICKOFF_DELAY": ("analysis", "kickoff_time_delay"),
        "RLSIGHT_OPENING_KICKOFF_SECOND": ("analysis", "opening_kickoff_second"),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            if section not in config:
                config[section] = {}

            # Type conversion
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.lstrip("-").isdigit():
                value = int(value)
            else:
                try:
                    value = float(value)
                except ValueError:
                    pass

            config[section][key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> RLSightConfig:
    """Convert a dictionary to RLSightConfig."""
    config = RLSightConfig()

    for key, value in data.get("analysis", {}).items():
        if hasattr(config.analysis, key):
            if key == "height_bounds":
                value = tuple(float(v) for v in value)
            setattr(config.analysis, key, value)
        else:
            logger.warning(f"Ignoring unknown analysis setting: {key}")

    for key, value in data.get("logging", {}).items():
        if hasattr(config.logging, key):
            setattr(config.logging, key, value)

    return config


def load_config(
    config_file: Path | None = None,
    include_env: bool = True,
    overrides: dict[str, Any] | None = None,
) -> RLSightConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables
        overrides: Section dicts applied last, e.g. {"analysis": {"zone_threshold": 1800}}

    Returns:
        Merged RLSightConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        config_data = merge_configs(config_data, load_env_config())

    if overrides:
        config_data = merge_configs(config_data, overrides)

    return dict_to_config(config_data)


# ============================================================================
# Logging
# ============================================================================


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger from a LoggingConfig."""
    config = config or get_config().logging
    root = logging.getLogger()
    root.setLevel(config.level.upper())
    formatter = logging.Formatter(config.format)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    root.addHandler(stream)

    if config.file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.file,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: RLSightConfig | None = None


def get_config() -> RLSightConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: RLSightConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None
