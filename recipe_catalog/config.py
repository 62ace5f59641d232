from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Runtime settings, overridable with RECIPES_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECIPES_", env_file=".env", extra="ignore"
    )

    # API server
    api_prefix: str = "/api/v1"
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Seed data loaded into the collection at startup
    seed_file: Path = PROJECT_ROOT / "data" / "recipes.json"
    seed_on_startup: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json | console

    # HTML front end
    api_url: str = "http://localhost:3001/api/v1"
    web_port: int = 5173
    search_debounce_ms: int = 300


@lru_cache
def get_settings() -> Settings:
    return Settings()
