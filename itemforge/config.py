"""Application configuration loaded from environment variables and .env file."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from itemforge.core.generation.loader import DEFAULT_CONFIG_PATH


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Generation data
    GENERATION_CONFIG_PATH: str = str(DEFAULT_CONFIG_PATH)
    GENERATION_SEED: Optional[int] = None  # set for reproducible runs

    # Cache
    CACHE_GROWTH_MODE: Literal["sync", "async"] = "async"
    CACHE_PRESEED_ON_MISS: bool = True
    CACHE_MAX_TEMPLATES: int = 500
    CACHE_WORKERS: int = 2
    PREWARM_ON_STARTUP: bool = True


settings = Settings()
