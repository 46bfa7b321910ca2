"""
Artifact Persistence Layer.

This package is responsible for writing exported documents and binary
assets to the local filesystem.
"""

from .writer import ArtifactWriter

__all__ = ["ArtifactWriter"]
