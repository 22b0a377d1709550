"""Configuration models for notionfeed."""

from pydantic import BaseModel, Field, HttpUrl, field_validator
from pathlib import Path
import yaml
import os
import stat


class NotionConfig(BaseModel):
    """Configuration for the Notion API connection."""

    api_key: str = Field(
        ...,
        description="Notion integration token"
    )

    root_page_id: str = Field(
        ...,
        description="Id or URL of the page whose content forms the root feed"
    )

    api_base: HttpUrl = Field(
        default="https://api.notion.com/v1",
        description="Notion REST API base URL"
    )

    notion_version: str = Field(
        default="2022-06-28",
        description="Value of the Notion-Version header"
    )

    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds"
    )

    @field_validator('api_key', 'root_page_id')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank credentials and ids."""
        if not v.strip():
            raise ValueError("Value must not be empty")
        return v.strip()

    model_config = {"frozen": True}


class CacheConfig(BaseModel):
    """Configuration for the response cache."""

    ttl_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="How long fetched children and query results stay fresh"
    )

    model_config = {"frozen": True}


class FeedConfig(BaseModel):
    """Configuration for feed assembly."""

    root_title: str = Field(
        default="Gallery",
        description="Title card text for the root feed"
    )

    show_database_names: bool = Field(
        default=False,
        description="Show databases as their own navigation nodes instead of eliding them"
    )

    icon_batch_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of page icons fetched concurrently"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for notionfeed."""

    notion: NotionConfig = Field(..., description="Notion API settings")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="Cache settings")
    feed: FeedConfig = Field(default_factory=FeedConfig, description="Feed settings")

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Validates file permissions before loading, since the file holds the
        Notion integration token.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            PermissionError: If file is group/world readable
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Please create the file with the following format:\n\n"
                f"notion:\n"
                f"  api_key: secret_YOUR_TOKEN_HERE\n"
                f"  root_page_id: 0123456789abcdef0123456789abcdef\n\n"
                f"cache:\n"
                f"  ttl_seconds: 5\n\n"
                f"feed:\n"
                f"  root_title: Gallery\n"
            )

        mode = os.stat(path).st_mode
        if mode & (stat.S_IRWXG | stat.S_IRWXO):
            raise PermissionError(
                f"Config file has overly permissive permissions: {oct(mode)}\n"
                f"Run: chmod 600 {path}"
            )

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    model_config = {"frozen": True}
