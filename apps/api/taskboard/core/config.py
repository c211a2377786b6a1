"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    debug: bool = False

    default_per_page: int = Field(default=15, ge=1, le=100)

    password_min_length: int = Field(default=8, ge=1)
    password_require_letters: bool = False
    password_require_mixed_case: bool = False
    password_require_numbers: bool = False
    password_require_symbols: bool = False

    password_hash_time_cost: int = Field(default=3, ge=1)
    password_hash_memory_cost: int = Field(default=65536, ge=8)
    password_hash_parallelism: int = Field(default=4, ge=1)

    model_config = SettingsConfigDict(env_prefix="TASKBOARD_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
