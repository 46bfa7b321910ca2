"""
Pydantic models for the Plex catalog entities that drive the export.

Plex answers every endpoint with a ``MediaContainer`` holding either
``Directory`` entries (library sections) or ``Metadata`` entries (items).
These models keep only the fields needed to navigate the tree and derive
output paths; the documents themselves are persisted verbatim.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EntityKind(str, Enum):
    """Every kind of node the exporter visits."""

    LIBRARY = "library"
    SECTION = "section"
    SHOW = "show"
    SEASON = "season"
    EPISODE = "episode"
    MOVIE = "movie"


class MediaPart(BaseModel):
    """A single media file backing an episode or movie."""

    file: str


class LibrarySection(BaseModel):
    """A library section as listed by ``/library/sections/all``."""

    key: str
    title: str
    kind: str
    locations: List[str] = Field(default_factory=list)

    @classmethod
    def from_directory(cls, directory: Dict[str, Any]) -> "LibrarySection":
        return cls(
            key=str(directory.get("key", "")),
            title=directory.get("title") or "Unknown Section",
            kind=directory.get("type", ""),
            locations=[
                loc["path"] for loc in directory.get("Location", []) if loc.get("path")
            ],
        )


class CatalogItem(BaseModel):
    """A show, season, episode or movie from a ``Metadata`` listing."""

    rating_key: str
    title: str
    kind: str
    parent_title: Optional[str] = None
    grandparent_title: Optional[str] = None
    library_section_title: Optional[str] = None
    index: Optional[int] = None
    parent_index: Optional[int] = None
    thumb: Optional[str] = None
    art: Optional[str] = None
    theme: Optional[str] = None
    locations: List[str] = Field(default_factory=list)
    parts: List[MediaPart] = Field(default_factory=list)

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any]) -> "CatalogItem":
        """Builds an item from a raw ``Metadata`` entry."""
        parts = [
            MediaPart(file=part["file"])
            for media in metadata.get("Media", [])
            for part in media.get("Part", [])
            if part.get("file")
        ]
        return cls(
            rating_key=str(metadata.get("ratingKey", "")),
            title=metadata.get("title") or "Unknown Title",
            kind=metadata.get("type", ""),
            parent_title=metadata.get("parentTitle"),
            grandparent_title=metadata.get("grandparentTitle"),
            library_section_title=metadata.get("librarySectionTitle"),
            index=metadata.get("index"),
            parent_index=metadata.get("parentIndex"),
            thumb=metadata.get("thumb") or None,
            art=metadata.get("art") or None,
            theme=metadata.get("theme") or None,
            locations=[
                loc["path"] for loc in metadata.get("Location", []) if loc.get("path")
            ],
            parts=parts,
        )

    @property
    def part_files(self) -> List[str]:
        return [part.file for part in self.parts]


class CatalogDocument:
    """
    Both representations of a single catalog response.

    The JSON and XML bodies are kept as the raw bytes the server sent; the
    parsed JSON is only used to walk the tree.

    Raises:
        ValueError: If the JSON body cannot be decoded into an object.
    """

    def __init__(self, json_body: bytes, xml_body: bytes):
        self.json_body = json_body
        self.xml_body = xml_body
        self.data: Dict[str, Any] = json.loads(json_body) if json_body else {}
        if not isinstance(self.data, dict):
            raise ValueError(
                f"expected a JSON object, got {type(self.data).__name__}"
            )

    @property
    def media_container(self) -> Dict[str, Any]:
        return self.data.get("MediaContainer") or {}

    @property
    def title(self) -> Optional[str]:
        return self.media_container.get("title1")

    def sections(self) -> List[LibrarySection]:
        return [
            LibrarySection.from_directory(d)
            for d in self.media_container.get("Directory", [])
        ]

    def items(self) -> List[CatalogItem]:
        return [
            CatalogItem.from_metadata(m)
            for m in self.media_container.get("Metadata", [])
        ]
