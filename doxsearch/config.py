"""Service configuration loaded from ``DOXSEARCH_*`` environment variables."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.enums import IndexCategory, ShardNaming


class Settings(BaseSettings):
    """Runtime settings for the search service."""

    model_config = SettingsConfigDict(
        env_prefix="DOXSEARCH_",
        env_file=".env",
        extra="ignore",
    )

    # ============ INDEX SOURCE ============

    index_path: Path = Field(
        default=Path("search"),
        description="Directory holding the shard files (used when index_url is unset)",
    )
    index_url: str | None = Field(
        default=None,
        description="Base URL of the static host serving the shard files",
    )
    index_category: IndexCategory = Field(
        default=IndexCategory.ALL, description="Index category to search"
    )
    shard_naming: ShardNaming = Field(
        default=ShardNaming.GENERATOR, description="Shard filename convention"
    )
    http_timeout: float = Field(default=10.0, gt=0, description="Shard fetch timeout (seconds)")
    preload: str = Field(
        default="", description="Comma-separated shard keys to load at startup"
    )

    # ============ QUERY LIMITS ============

    default_limit: int = Field(default=20, ge=1, description="Results when no limit is given")
    max_limit: int = Field(default=100, ge=1, description="Upper bound on requested limits")

    # ============ SERVER ============

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_allowed_origins: str = "*"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def preload_keys(self) -> list[str]:
        return [k.strip() for k in self.preload.split(",") if k.strip()]


settings = Settings()
