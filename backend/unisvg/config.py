"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    unisvg_env: str = "development"
    unisvg_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Upstream generator
    model_generator: str = "claude-sonnet-4-5-20250929"
    generator_max_tokens: int = 4096

    # Retry / fallback defaults
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    timeout_ms: int = 30000
    fallback_enabled: bool = True
    include_error_details: bool = True
    error_log_size: int = 100

    # Cache
    cache_ttl_seconds: int = 3600

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
