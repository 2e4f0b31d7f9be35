"""
Ludo Arena - Application Settings

Loads configuration from environment variables using Pydantic Settings.
The engine itself needs none of these; they configure game rooms.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings

from src.engine.validators import validate_player_count


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase (only needed to host rooms over realtime channels)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Game rooms
    default_player_count: int = 4
    auto_move: bool = True
    turn_timeout_seconds: float = 30.0
    channel_prefix: str = "game"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("default_player_count")
    @classmethod
    def _player_count_in_range(cls, value: int) -> int:
        return validate_player_count(value)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()
