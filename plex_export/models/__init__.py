"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration, catalog entities
and statistics.
"""

from .catalog import CatalogDocument, CatalogItem, EntityKind, LibrarySection, MediaPart
from .config import ExportConfig
from .stats import ExportStats

__all__ = [
    "CatalogDocument",
    "CatalogItem",
    "EntityKind",
    "ExportConfig",
    "ExportStats",
    "LibrarySection",
    "MediaPart",
]
