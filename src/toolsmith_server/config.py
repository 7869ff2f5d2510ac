"""Configuration module for toolsmith-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolsmithServerSettings(BaseSettings):
    """Main configuration settings for toolsmith-server.

    All settings can be overridden via environment variables with the TOOLSMITH_ prefix.
    For example, TOOLSMITH_BACKEND_URL will override the backend_url setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Backend web API
    backend_url: str = "http://localhost:8080"
    backend_api_path: str = "/api/data/v9.2"
    backend_token: str | None = None
    backend_timeout: float = 30.0
    page_size_limit: int = 5000

    # Durable configuration record (relative to data_dir)
    data_dir: str = "."
    config_file: str = "toolsmith_config.json"

    # Discovery cache
    default_cache_ttl_seconds: int = 3600
    discovery_lock_enabled: bool = True

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLSMITH_")

    @property
    def resolved_config_path(self) -> Path:
        """Get the full path to the configuration record file."""
        return Path(self.data_dir) / self.config_file

    @property
    def backend_base_url(self) -> str:
        """Get the backend base URL including the API path."""
        return self.backend_url.rstrip("/") + "/" + self.backend_api_path.strip("/")
