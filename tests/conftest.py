"""Shared fixtures: an in-memory Plex catalog and a config rooted in tmp_path."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from plex_export.exceptions import NoChildrenError, TransientCatalogError
from plex_export.models.catalog import CatalogDocument
from plex_export.models.config import ExportConfig

RUN_TAG = "20240101-120000"


def make_document(container: dict[str, Any]) -> CatalogDocument:
    """Wraps a MediaContainer body into the two representations Plex returns."""
    json_body = json.dumps({"MediaContainer": container}).encode("utf-8")
    xml_body = f'<MediaContainer size="{container.get("size", 0)}" />'.encode("utf-8")
    return CatalogDocument(json_body, xml_body)


def metadata(**fields: Any) -> CatalogDocument:
    return make_document({"size": 1, "Metadata": [fields]})


def listing(*entries: dict[str, Any], title: str | None = None) -> CatalogDocument:
    container: dict[str, Any] = {"size": len(entries), "Metadata": list(entries)}
    if title:
        container["title1"] = title
    return make_document(container)


def parts(*files: str) -> list[dict[str, Any]]:
    return [{"Part": [{"file": f} for f in files]}]


class FakeCatalogClient:
    """
    Stands in for PlexCatalogClient.

    Each mapping value is either the document to return or an exception to raise.
    """

    def __init__(self) -> None:
        self.sections: CatalogDocument | Exception = make_document(
            {"title1": "Plex Library", "Directory": []}
        )
        self.section_items: dict[str, CatalogDocument | Exception] = {}
        self.entities: dict[str, CatalogDocument | Exception] = {}
        self.children: dict[str, CatalogDocument | Exception] = {}
        self.assets: dict[str, bytes | Exception] = {}
        self.calls: list[tuple[str, str]] = []

    @staticmethod
    def _resolve(value: Any) -> Any:
        if isinstance(value, BaseException):
            raise value
        return value

    async def fetch_sections(self) -> CatalogDocument:
        self.calls.append(("sections", ""))
        return self._resolve(self.sections)

    async def fetch_section_items(self, section_key: str) -> CatalogDocument:
        self.calls.append(("section", section_key))
        return self._resolve(
            self.section_items.get(
                section_key, TransientCatalogError(f"no section {section_key}")
            )
        )

    async def fetch_entity(self, rating_key: str) -> CatalogDocument:
        self.calls.append(("entity", rating_key))
        return self._resolve(
            self.entities.get(rating_key, TransientCatalogError(f"no item {rating_key}"))
        )

    async def fetch_children(self, rating_key: str) -> CatalogDocument:
        self.calls.append(("children", rating_key))
        return self._resolve(
            self.children.get(rating_key, NoChildrenError(f"No children for {rating_key}"))
        )

    async def fetch_asset(self, ref: str):
        self.calls.append(("asset", ref))
        data = self._resolve(self.assets.get(ref, f"bytes of {ref}".encode()))
        yield data


@pytest.fixture()
def export_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def config(export_root: Path) -> ExportConfig:
    return ExportConfig(
        server_address="http://plex.local:32400",
        auth_token="secret-token",
        export_root=str(export_root),
        run_tag=RUN_TAG,
        retry_base_delay=0,
    )


@pytest.fixture()
def fake_client() -> FakeCatalogClient:
    return FakeCatalogClient()
