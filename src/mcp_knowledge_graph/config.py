"""
Configuration for the MCP Knowledge Graph service.

Settings are grouped per concern and loaded from environment variables
(pydantic-settings). Each group has its own prefix:

    MCP_KG_STORAGE_*  - storage backend selection and Redis connection
    MCP_KG_QUERY_*    - traversal and analysis limits
    MCP_KG_SERVER_*   - MCP server transport
    MCP_KG_LOG_*      - logging
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Graph storage backend configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_KG_STORAGE_", extra="ignore")

    backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Storage backend: 'memory' (volatile, per process) or 'redis' (durable)",
    )
    redis_url: str = Field(default="redis://localhost:6379", description="Redis connection URL")
    redis_password: SecretStr | None = Field(default=None, description="Redis password (overrides URL credentials)")
    key_prefix: str = Field(default="mcp:kg:", min_length=1, description="Prefix for all Redis keys")
    max_connections: int = Field(default=16, ge=1, le=512, description="Redis connection pool size")
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-call storage timeout; None waits indefinitely",
    )


class QuerySettings(BaseSettings):
    """Traversal and analysis limits."""

    model_config = SettingsConfigDict(env_prefix="MCP_KG_QUERY_", extra="ignore")

    max_depth_limit: int = Field(default=10, ge=1, le=50, description="Upper bound accepted for max_depth")
    max_path_results: int = Field(
        default=1000,
        ge=1,
        description="Path enumeration stops after this many paths (result is marked truncated)",
    )
    top_n: int = Field(default=10, ge=1, le=1000, description="Ranked entries returned by centrality/hub analysis")
    member_preview: int = Field(default=10, ge=1, le=1000, description="Members listed per community")
    conflict_preview: int = Field(default=20, ge=0, le=1000, description="Merge conflicts listed in merge results")


class ServerSettings(BaseSettings):
    """MCP server transport configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_KG_SERVER_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    transport: Literal["http", "stdio"] = "http"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="MCP_KG_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Top-level settings composed of the per-concern groups."""

    model_config = SettingsConfigDict(extra="ignore")

    storage: StorageSettings = Field(default_factory=StorageSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


settings = Settings()
