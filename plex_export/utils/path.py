"""
Derives the destination of every exported artifact from catalog data.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pathvalidate import sanitize_filename

from plex_export.models.catalog import CatalogItem, EntityKind

# Per-kind infix placed between an entity's name and the run tag
KIND_SUFFIXES = {
    EntityKind.LIBRARY: "plex-library",
    EntityKind.SECTION: "plex-section",
    EntityKind.SHOW: "plex-show-item",
    EntityKind.SEASON: "plex-season-item",
    EntityKind.EPISODE: "plex-show-item",
    EntityKind.MOVIE: "plex-movie-item",
}


@dataclass(frozen=True)
class ExportTarget:
    """A destination directory plus the base name shared by an artifact group."""

    directory: Path
    base_name: str

    def path(self, suffix: str) -> Path:
        """Returns the full path of one artifact, e.g. ``path(".json")``."""
        return self.directory / f"{self.base_name}{suffix}"


class PathDeriver:
    """
    Maps catalog entities to export targets.

    Catalog paths (section locations, show locations and media files) are
    absolute paths on the Plex server. They are appended verbatim to the
    export root so the export mirrors the server's own directory layout.
    """

    def __init__(self, export_root: str, run_tag: str) -> None:
        self.export_root = export_root.rstrip("/")
        self.run_tag = run_tag

    def _base_name(self, name: str, kind: EntityKind) -> str:
        return f"{name}-{KIND_SUFFIXES[kind]}-{self.run_tag}"

    def _mirror(self, server_path: str) -> Path:
        """Places a server-side absolute path under the export root."""
        if not server_path.startswith("/"):
            server_path = "/" + server_path
        return Path(self.export_root + server_path)

    def library_target(self, title: str) -> ExportTarget:
        return ExportTarget(
            Path(self.export_root or "/"),
            self._base_name(sanitize_filename(title), EntityKind.LIBRARY),
        )

    def section_targets(self, title: str, locations: List[str]) -> List[ExportTarget]:
        """One target per declared location of the library section."""
        base_name = self._base_name(sanitize_filename(title), EntityKind.SECTION)
        return [ExportTarget(self._mirror(loc), base_name) for loc in locations]

    def show_targets(self, item: CatalogItem) -> List[ExportTarget]:
        base_name = self._base_name(sanitize_filename(item.title), EntityKind.SHOW)
        return [ExportTarget(self._mirror(loc), base_name) for loc in item.locations]

    def season_targets(
        self, item: CatalogItem, episode_file: Optional[str]
    ) -> List[ExportTarget]:
        """
        A season has no folder of its own in the catalog, so its artifacts go
        next to the media file of the last episode that was exported.
        """
        if not episode_file:
            return []
        directory = self._mirror(episode_file).parent
        return [
            ExportTarget(
                directory,
                self._base_name(sanitize_filename(item.title), EntityKind.SEASON),
            )
        ]

    def part_targets(self, item: CatalogItem, kind: EntityKind) -> List[ExportTarget]:
        """One target per media part, named after the part's file without extension."""
        targets = []
        for part in item.parts:
            media_path = self._mirror(part.file)
            targets.append(
                ExportTarget(media_path.parent, self._base_name(media_path.stem, kind))
            )
        return targets

    def derive(
        self,
        kind: EntityKind,
        item: CatalogItem,
        locations: Optional[List[str]] = None,
        episode_file: Optional[str] = None,
    ) -> List[ExportTarget]:
        """
        Returns every export target of ``item`` for the given entity kind.

        Args:
            kind: The kind of node being exported.
            item: The node itself. For libraries and sections only ``title`` is used.
            locations: Section locations, required for ``EntityKind.SECTION``.
            episode_file: The last resolved episode file, used for seasons.
        """
        if kind is EntityKind.LIBRARY:
            return [self.library_target(item.title)]
        if kind is EntityKind.SECTION:
            return self.section_targets(item.title, locations or [])
        if kind is EntityKind.SHOW:
            return self.show_targets(item)
        if kind is EntityKind.SEASON:
            return self.season_targets(item, episode_file)
        if kind in (EntityKind.EPISODE, EntityKind.MOVIE):
            return self.part_targets(item, kind)
        raise ValueError(f"Cannot derive export targets for kind: {kind}")
