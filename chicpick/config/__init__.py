"""Settings for the closet client."""

from .settings import ClosetSettings, get_settings

__all__ = ["ClosetSettings", "get_settings"]
