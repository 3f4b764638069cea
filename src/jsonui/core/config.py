"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Engine settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="JSONUI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Streaming
    stream_max_document_size: int = Field(
        default=512 * 1024, gt=0, description="Max characters accepted per streamed document"
    )
    stream_max_depth: int = Field(default=32, gt=0, description="Max container nesting depth")
    stream_batch_size: int = Field(
        default=0, ge=0, description="Coalesce fragments to this many characters (0 = off)"
    )

    # Export
    export_cache_size: int = Field(default=32, gt=0, description="Export cache max size")
    export_cache_ttl: int = Field(default=3600, gt=0, description="Export cache TTL (seconds)")
    default_project_name: str = Field(default="generated-ui", description="Exported project name")

    # Validation
    default_validate_on: str = Field(
        default="blur", pattern="^(change|blur|submit)$", description="Default trigger policy"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
