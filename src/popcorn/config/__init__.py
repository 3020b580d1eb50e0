"""Configuration for Popcorn Catcher."""

from .settings import DisplaySettings, LeaderboardSettings, Settings, get_settings

__all__ = ["DisplaySettings", "LeaderboardSettings", "Settings", "get_settings"]
