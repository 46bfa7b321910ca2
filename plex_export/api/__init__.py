"""
Plex API Layer.

This package handles all communication with the Plex Media Server.
"""

from .client import PlexCatalogClient

__all__ = ["PlexCatalogClient"]
