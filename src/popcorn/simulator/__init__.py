"""Desktop window for Popcorn Catcher."""

from .window import GameWindow, WindowConfig, Screen

__all__ = ["GameWindow", "WindowConfig", "Screen"]
