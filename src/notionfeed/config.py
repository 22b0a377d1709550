"""Configuration management with lazy validation and environment overrides.

Environment variables:
- NOTIONFEED_NOTION_API_KEY: Override notion.api_key
- NOTIONFEED_NOTION_ROOT_PAGE_ID: Override notion.root_page_id
- NOTIONFEED_CACHE_TTL_SECONDS: Override cache.ttl_seconds
"""

import os
from functools import cached_property
from pathlib import Path
from typing import Any, Dict

import yaml

from notionfeed.models.config import CacheConfig, Config, FeedConfig, NotionConfig
from notionfeed.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "notionfeed" / "config.yaml"


def apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply NOTIONFEED_* environment variable overrides to raw config data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    data.setdefault("notion", {})
    data.setdefault("cache", {})

    if env_api_key := os.getenv("NOTIONFEED_NOTION_API_KEY"):
        data["notion"]["api_key"] = env_api_key

    if env_root := os.getenv("NOTIONFEED_NOTION_ROOT_PAGE_ID"):
        data["notion"]["root_page_id"] = env_root

    if env_ttl := os.getenv("NOTIONFEED_CACHE_TTL_SECONDS"):
        try:
            data["cache"]["ttl_seconds"] = float(env_ttl)
        except ValueError:
            logger.warning("config_env_override_ignored", variable="NOTIONFEED_CACHE_TTL_SECONDS", value=env_ttl)

    return data


class ConfigManager:
    """
    Configuration manager with lazy validation.

    Loads the config file and validates sections only when first accessed,
    so a missing optional section never blocks startup.

    Example:
        >>> config_mgr = ConfigManager.load_default()
        >>> notion_config = config_mgr.notion  # Validates Notion config on first access
    """

    def __init__(self, data: Dict[str, Any]):
        """
        Initialize config manager with raw config data.

        Args:
            data: Configuration dictionary (YAML content plus env overrides)
        """
        self._data = data

    @classmethod
    def load_default(cls) -> "ConfigManager":
        """
        Load configuration from default path (~/.config/notionfeed/config.yaml).

        Raises:
            FileNotFoundError: If neither config file nor env overrides exist
            PermissionError: If config file has wrong permissions
        """
        return cls.load_from_path(DEFAULT_CONFIG_PATH)

    @classmethod
    def load_from_path(cls, path: Path) -> "ConfigManager":
        """
        Load configuration from specific path, applying environment overrides.

        A missing file is tolerated when environment variables supply the
        required Notion settings.

        Args:
            path: Path to config.yaml file

        Returns:
            ConfigManager instance with loaded config

        Raises:
            FileNotFoundError: If config file doesn't exist and no overrides are set
            PermissionError: If config file has wrong permissions
            ValueError: If YAML is malformed
        """
        logger.info("config_loading", path=str(path))

        data: Dict[str, Any] = {}
        if path.exists():
            try:
                # Config.load performs the permission check
                data = Config.load(path).model_dump(mode="json")
            except PermissionError as e:
                logger.error("config_permission_error", path=str(path), error=str(e))
                raise
            except yaml.YAMLError as e:
                logger.error("config_parse_error", path=str(path), error=str(e))
                raise ValueError(f"Configuration file is not valid YAML: {e}") from e
            except ValueError:
                # Validation of individual sections is deferred; keep raw data
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

        data = apply_env_overrides(data)

        if not data["notion"]:
            logger.error("config_not_found", path=str(path))
            raise FileNotFoundError(
                f"Configuration file not found at {path} and no NOTIONFEED_* environment variables set.\n"
                "Either create a config file or set environment variables."
            )

        logger.info("config_loaded", path=str(path))
        return cls(data)

    def _validate(self, section: str, model: type) -> Any:
        try:
            return model(**(self._data.get(section) or {}))
        except Exception as e:
            logger.error("config_validation_error", section=section, error=str(e))
            raise ValueError(f"Configuration validation failed for '{section}': {e}") from e

    @cached_property
    def notion(self) -> NotionConfig:
        """Get Notion configuration (validated on first access)."""
        return self._validate("notion", NotionConfig)

    @cached_property
    def cache(self) -> CacheConfig:
        """Get cache configuration (validated on first access)."""
        return self._validate("cache", CacheConfig)

    @cached_property
    def feed(self) -> FeedConfig:
        """Get feed configuration (validated on first access)."""
        return self._validate("feed", FeedConfig)
