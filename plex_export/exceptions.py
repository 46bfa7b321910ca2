"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from typing import Optional


class PlexExportError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(PlexExportError):
    """Raised for issues related to configuration loading or validation."""


class CatalogError(PlexExportError):
    """Raised by the catalog client when a request to the Plex server fails."""

    def __init__(
        self, message: str, url: Optional[str] = None, status: Optional[int] = None
    ):
        super().__init__(message)
        self.url = url
        self.status = status


class TransientCatalogError(CatalogError):
    """Raised when a retryable failure persists after all retry attempts."""


class CatalogRequestError(CatalogError):
    """Raised for non-retryable HTTP errors or unreadable responses."""


class NoChildrenError(CatalogError):
    """Raised when a container entity has no children to list."""


class CatalogUnavailableError(PlexExportError):
    """Raised when the root catalog cannot be fetched. Aborts the whole run."""


class SectionError(PlexExportError):
    """Raised when the item listing of a library section is unavailable."""


class ItemFetchError(PlexExportError):
    """Raised when the metadata of a single catalog node cannot be fetched."""


class AssetError(PlexExportError):
    """Raised when a cover, background or theme asset cannot be saved."""
