"""Settings for the TrainFit account client.

Values come from ``TRAINFIT_*`` environment variables or a local ``.env``
file. ``get_settings()`` caches the loaded instance; call
``get_settings.cache_clear()`` after changing the environment.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_DIR = Path.home() / ".trainfit"


class Settings(BaseSettings):
    """Client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINFIT_",
        env_file=".env",
        extra="ignore",
    )

    api_base_url: str = Field(default="http://localhost:3333")
    request_timeout: float = Field(default=15.0, gt=0)

    # Inclusive upper bound for avatar uploads
    avatar_max_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    password_min_length: int = Field(default=6, ge=1)
    password_max_length: int = Field(default=25, ge=1)

    config_dir: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> Settings:
        """Load a fresh settings instance, bypassing the cache."""
        return cls()


@lru_cache
def get_settings() -> Settings:
    return Settings.load()


def get_config_dir() -> Path:
    """Get/create the per-user config directory."""
    d = get_settings().config_dir or DEFAULT_CONFIG_DIR
    d = Path(d).expanduser()
    d.mkdir(parents=True, exist_ok=True)
    return d
