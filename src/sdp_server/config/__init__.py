"""Configuration package — re-exports for convenience."""

from sdp_server.config.loader import ConfigLoader
from sdp_server.config.settings import Settings

__all__ = ["ConfigLoader", "Settings"]
