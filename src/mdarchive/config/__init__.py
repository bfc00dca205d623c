"""Configuration loading for mdarchive."""

from mdarchive.config.loader import default_config_path, load_settings

__all__ = ["default_config_path", "load_settings"]
