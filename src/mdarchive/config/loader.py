"""Settings loader with YAML and environment variable support.

This module reads ~/.config/mdarchive/config.yaml (all keys optional) and
lets environment variables with the MDARCHIVE_* prefix override it.

Environment variables:
- MDARCHIVE_ARCHIVE_HEADING: Override archive_heading
- MDARCHIVE_ARCHIVE_HEADING_DEPTH: Override archive_heading_depth
- MDARCHIVE_USE_TAB: Override indentation.use_tab ("true"/"false")
- MDARCHIVE_TAB_SIZE: Override indentation.tab_size
- MDARCHIVE_USE_WEEKS: Override dates.use_weeks
- MDARCHIVE_USE_DAYS: Override dates.use_days
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from mdarchive.models.config import ArchiverSettings
from mdarchive.utils.logging import get_logger

logger = get_logger(__name__)


def default_config_path() -> Path:
    return Path.home() / ".config" / "mdarchive" / "config.yaml"


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_settings(config_path: Optional[Path] = None) -> ArchiverSettings:
    """Load settings from YAML with environment variable overrides.

    A missing config file is not an error: defaults apply.

    Args:
        config_path: Path to config file. If None, uses ~/.config/mdarchive/config.yaml

    Returns:
        Validated ArchiverSettings

    Raises:
        ValueError: If the file or an override is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    logger.debug("config_loading", path=str(config_path))

    if config_path.exists():
        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config_yaml_error", path=str(config_path), error=str(e))
            raise ValueError(f"Configuration file is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
    else:
        data = {}

    data = _apply_env_overrides(data)

    try:
        settings = ArchiverSettings(**data)
    except ValidationError as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e

    logger.debug("config_loaded", path=str(config_path))
    return settings


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be true or false, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied

    Raises:
        ValueError: If an override cannot be converted
    """
    data = dict(data)
    indentation = dict(data.get("indentation") or {})
    dates = dict(data.get("dates") or {})

    if env_heading := os.getenv("MDARCHIVE_ARCHIVE_HEADING"):
        data["archive_heading"] = env_heading

    if env_depth := os.getenv("MDARCHIVE_ARCHIVE_HEADING_DEPTH"):
        data["archive_heading_depth"] = _parse_int("MDARCHIVE_ARCHIVE_HEADING_DEPTH", env_depth)

    if env_use_tab := os.getenv("MDARCHIVE_USE_TAB"):
        indentation["use_tab"] = _parse_bool("MDARCHIVE_USE_TAB", env_use_tab)

    if env_tab_size := os.getenv("MDARCHIVE_TAB_SIZE"):
        indentation["tab_size"] = _parse_int("MDARCHIVE_TAB_SIZE", env_tab_size)

    if env_use_weeks := os.getenv("MDARCHIVE_USE_WEEKS"):
        dates["use_weeks"] = _parse_bool("MDARCHIVE_USE_WEEKS", env_use_weeks)

    if env_use_days := os.getenv("MDARCHIVE_USE_DAYS"):
        dates["use_days"] = _parse_bool("MDARCHIVE_USE_DAYS", env_use_days)

    if indentation:
        data["indentation"] = indentation
    if dates:
        data["dates"] = dates

    return data
