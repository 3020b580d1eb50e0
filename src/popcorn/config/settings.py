"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DisplaySettings(BaseSettings):
    """Canvas and frame-rate settings."""

    model_config = SettingsConfigDict(
        env_prefix="POPCORN_DISPLAY_",
        env_file=".env",
        extra="ignore",
    )

    # Canvas size in CSS pixels (multiplied by pixel_ratio for the buffer)
    width: int = Field(default=420, gt=0)
    height: int = Field(default=720, gt=0)

    fps: int = 60
    pixel_ratio: float = Field(default=1.0, ge=1.0, le=2.0)


class LeaderboardSettings(BaseSettings):
    """Remote leaderboard (JSONBin) settings."""

    model_config = SettingsConfigDict(
        env_prefix="POPCORN_JSONBIN_",
        env_file=".env",
        extra="ignore",
    )

    base_url: str = "https://api.jsonbin.io/v3"
    bin_id: str = ""
    master_key: str = ""
    timeout: float = 15.0

    # Retry settings (milliseconds, multiplied by the attempt number)
    max_attempts: int = Field(default=5, ge=1)
    jitter_ms: float = 250.0
    read_backoff_ms: float = 200.0
    write_backoff_ms: float = 250.0
    verify_backoff_ms: float = 300.0

    # Document limits
    retention_cap: int = Field(default=1000, ge=1)
    ranked_limit: int = Field(default=50, ge=1)

    @property
    def is_configured(self) -> bool:
        """Check if a remote bin is available."""
        return bool(self.bin_id and self.master_key)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="POPCORN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Paths
    skins_path: Path = Field(default_factory=lambda: Path.cwd() / "skins")
    profile_path: Path = Field(
        default_factory=lambda: Path.home() / ".popcorn" / "profile.json"
    )
    log_file: Path = Field(default_factory=lambda: Path.cwd() / "popcorn.log")

    # Nested settings
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    leaderboard: LeaderboardSettings = Field(default_factory=LeaderboardSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
