"""
The main orchestrator that walks the Plex catalog and exports every node.
"""

import logging
from contextlib import aclosing
from typing import List, Optional, Tuple

from pydantic import ValidationError
from rich.markup import escape

from plex_export.api.client import PlexCatalogClient
from plex_export.exceptions import (
    AssetError,
    CatalogError,
    CatalogUnavailableError,
    ItemFetchError,
    NoChildrenError,
    SectionError,
)
from plex_export.media.writer import ArtifactWriter
from plex_export.models.catalog import (
    CatalogDocument,
    CatalogItem,
    EntityKind,
    LibrarySection,
)
from plex_export.models.config import ExportConfig
from plex_export.models.stats import ExportStats
from plex_export.utils.formatting import episode_label, format_percentage
from plex_export.utils.path import ExportTarget, PathDeriver

log = logging.getLogger(__name__)

# Asset field -> file suffix, in the order they are fetched
ASSET_SUFFIXES = (
    ("thumb", "-thumb.jpg"),
    ("art", "-art.jpg"),
    ("theme", "-theme.mp3"),
)


class ExportManager:
    """
    Walks Library -> Section -> (Show -> Season -> Episode | Movie) depth-first,
    one node at a time, and writes the artifacts of every node it visits.

    Only a failure to fetch the root catalog escapes ``run``. Every other
    failure is logged and the traversal carries on with the next sibling.
    """

    def __init__(
        self,
        config: ExportConfig,
        client: PlexCatalogClient,
        writer: ArtifactWriter,
        stats: Optional[ExportStats] = None,
    ):
        self.config = config
        self.client = client
        self.writer = writer
        self.stats = stats or ExportStats()
        self.deriver = PathDeriver(config.export_root, config.run_tag)
        self._item_handlers = {
            "movie": self._export_movie,
            "show": self._export_show,
        }

    async def run(self) -> ExportStats:
        """
        Exports the whole catalog.

        Raises:
            CatalogUnavailableError: If the root catalog cannot be fetched.
        """
        sections = await self._export_library()

        for position, section in enumerate(sections, start=1):
            log.info(
                f"[bold cyan]▶ Section {position} of {len(sections)}[/] "
                f"({format_percentage(position - 1, len(sections))} of the sections exported)"
            )
            try:
                await self._export_section(section)
            except SectionError as e:
                self.stats.sections_failed += 1
                log.error(f"[red]✗ {escape(str(e))}[/red]")

        return self.stats

    async def _export_library(self) -> List[LibrarySection]:
        log.info("Fetching library sections")
        try:
            document = await self.client.fetch_sections()
        except CatalogError as e:
            raise CatalogUnavailableError(
                f"Could not fetch the library sections: {e}"
            ) from e

        title = document.title or "Plex Library"
        try:
            sections = document.sections()
        except ValidationError as e:
            raise CatalogUnavailableError(
                f"The library sections listing is malformed: {e}"
            ) from e
        log.info(f"Library: {escape(title)} with {len(sections)} sections")

        await self._write_documents(self.deriver.library_target(title), document)
        return sections

    async def _export_section(self, section: LibrarySection) -> None:
        if section.kind not in self.config.supported_kinds:
            self.stats.sections_skipped += 1
            log.info(
                f"[yellow]○ Skipping {escape(section.title)} ({escape(section.kind)}): "
                "unsupported type[/yellow]"
            )
            return

        try:
            document = await self.client.fetch_section_items(section.key)
        except CatalogError as e:
            raise SectionError(
                f"Could not fetch section '{section.title}': {e}"
            ) from e

        try:
            items = document.items()
        except ValidationError as e:
            raise SectionError(
                f"Section '{section.title}' returned a malformed listing: {e}"
            ) from e
        title = document.title or section.title
        log.info(f"Section: {escape(title)} ({len(items)} items)")

        for target in self.deriver.section_targets(title, section.locations):
            await self._write_documents(target, document)

        handler = self._item_handlers[section.kind]
        for position, item in enumerate(items, start=1):
            if position % self.config.progress_interval == 0:
                log.info(
                    f"  [dim]progress {position} of {len(items)} - "
                    f"{format_percentage(position - 1, len(items))}[/dim]"
                )
            try:
                await handler(item.rating_key)
                self.stats.items_exported += 1
            except ItemFetchError as e:
                self.stats.items_failed += 1
                log.error(f"[red]  ✗ {escape(str(e))}[/red]")

        self.stats.sections_exported += 1

    async def _fetch_item(
        self, rating_key: str, kind: EntityKind
    ) -> Tuple[CatalogDocument, CatalogItem]:
        """Fetches one entity's metadata, converting client failures to ItemFetchError."""
        try:
            document = await self.client.fetch_entity(rating_key)
        except CatalogError as e:
            raise ItemFetchError(
                f"Could not fetch {kind.value} {rating_key}: {e}"
            ) from e

        try:
            items = document.items()
        except ValidationError as e:
            raise ItemFetchError(
                f"Malformed metadata for {kind.value} {rating_key}: {e}"
            ) from e
        if not items:
            raise ItemFetchError(f"No metadata returned for {kind.value} {rating_key}")
        return document, items[0]

    async def _export_movie(self, rating_key: str) -> None:
        document, item = await self._fetch_item(rating_key, EntityKind.MOVIE)
        log.info(f"- {escape(item.library_section_title or '')} | {escape(item.title)}")

        for target in self.deriver.derive(EntityKind.MOVIE, item):
            await self._write_artifacts(target, document, item)

    async def _export_show(self, rating_key: str) -> None:
        document, item = await self._fetch_item(rating_key, EntityKind.SHOW)
        log.info(f"- {escape(item.library_section_title or '')} | {escape(item.title)}")

        targets = self.deriver.derive(EntityKind.SHOW, item)
        if not targets:
            log.warning(
                f"[yellow]  Show '{escape(item.title)}' has no location; "
                "skipping show artifacts.[/yellow]"
            )
        for target in targets:
            await self._write_artifacts(target, document, item)

        try:
            children = await self.client.fetch_children(rating_key)
            seasons = children.items()
        except NoChildrenError:
            log.warning(
                f"[yellow]  Show does not have children: {escape(item.title)}[/yellow]"
            )
            return
        except (CatalogError, ValidationError) as e:
            self.stats.items_failed += 1
            log.error(
                f"[red]  ✗ Could not list seasons of '{escape(item.title)}': "
                f"{escape(str(e))}[/red]"
            )
            return

        for season in seasons:
            try:
                await self._export_season(season.rating_key)
            except ItemFetchError as e:
                self.stats.items_failed += 1
                log.error(f"[red]  ✗ {escape(str(e))}[/red]")

    async def _export_season(self, rating_key: str) -> None:
        document, item = await self._fetch_item(rating_key, EntityKind.SEASON)
        log.info(
            f"  - {escape(item.library_section_title or '')} | "
            f"{escape(item.parent_title or '')} - {escape(item.title)}"
        )

        try:
            children = await self.client.fetch_children(rating_key)
            episodes = children.items()
        except NoChildrenError:
            self.stats.seasons_without_episodes += 1
            log.warning(
                f"[yellow]  Season does not have children: {escape(item.title)}[/yellow]"
            )
            return
        except (CatalogError, ValidationError) as e:
            raise ItemFetchError(
                f"Could not list episodes of season '{item.title}': {e}"
            ) from e

        # Episodes are visited in listing order; the season is placed beside
        # the first media file of the last episode that resolved.
        last_episode_file: Optional[str] = None
        for episode in episodes:
            try:
                episode_files = await self._export_episode(episode.rating_key)
            except ItemFetchError as e:
                self.stats.items_failed += 1
                log.error(f"[red]    ✗ {escape(str(e))}[/red]")
                continue
            if episode_files:
                last_episode_file = episode_files[0]

        targets = self.deriver.derive(
            EntityKind.SEASON, item, episode_file=last_episode_file
        )
        if not targets:
            self.stats.seasons_without_episodes += 1
            log.warning(
                f"[yellow]  No episode of '{escape(item.title)}' could be exported; "
                "skipping season artifacts.[/yellow]"
            )
            return

        for target in targets:
            await self._write_artifacts(target, document, item)

    async def _export_episode(self, rating_key: str) -> List[str]:
        """Exports one episode and returns the server paths of its media files."""
        document, item = await self._fetch_item(rating_key, EntityKind.EPISODE)
        log.info(
            f"   - {escape(item.library_section_title or '')} | "
            f"{escape(item.grandparent_title or '')} - "
            f"{episode_label(item.parent_index, item.index)} - {escape(item.title)}"
        )

        for target in self.deriver.derive(EntityKind.EPISODE, item):
            await self._write_artifacts(target, document, item)
        return item.part_files

    async def _write_artifacts(
        self, target: ExportTarget, document: CatalogDocument, item: CatalogItem
    ) -> None:
        """Writes the document pair of a target, then each referenced asset."""
        await self._write_documents(target, document)

        for field, suffix in ASSET_SUFFIXES:
            ref = getattr(item, field)
            if not ref:
                continue
            try:
                await self._save_asset(ref, target, suffix)
                self.stats.assets_written += 1
            except AssetError as e:
                self.stats.assets_failed += 1
                log.error(f"[red]    ✗ {escape(str(e))}[/red]")

    async def _write_documents(
        self, target: ExportTarget, document: CatalogDocument
    ) -> None:
        for suffix, body in ((".json", document.json_body), (".xml", document.xml_body)):
            path = target.path(suffix)
            try:
                await self.writer.write_document(path, body)
                self.stats.documents_written += 1
            except OSError as e:
                self.stats.documents_failed += 1
                log.error(f"[red]    ✗ Could not write '{escape(str(path))}': {e}[/red]")

    async def _save_asset(self, ref: str, target: ExportTarget, suffix: str) -> None:
        path = target.path(suffix)
        try:
            async with aclosing(self.client.fetch_asset(ref)) as chunks:
                await self.writer.write_stream(path, chunks)
        except (CatalogError, OSError) as e:
            raise AssetError(f"Could not save asset '{path.name}': {e}") from e
