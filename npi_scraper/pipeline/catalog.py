"""Taxonomy catalog loading and building.

The catalog is a JSON list of ``{"number", "name", "definitionUrl"}`` objects
built from the NUCC code-set page, keyed by taxonomy code at load time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

from npi_scraper.common.errors import StageError
from npi_scraper.common.fs import read_json, write_json
from npi_scraper.common.models import CatalogEntry

# Specialisations first, then grouping headers; load_catalog keeps the first duplicate.
CATALOG_ITEM_SELECTORS = ("li#flx", "li#foldheader2")
_NAME_SUFFIX_RE = re.compile(r"\s-\s$")


@dataclass(frozen=True)
class CatalogBuild:
    entries: list[CatalogEntry]
    skipped: list[str]


def _entry_from_dict(item: dict) -> CatalogEntry | None:
    number = item.get("number")
    if not number:
        return None
    return CatalogEntry(
        number=str(number),
        name=item.get("name"),
        definition_url=item.get("definitionUrl"),
    )


def load_catalog(path: Path) -> dict[str, CatalogEntry]:
    if not path.exists():
        raise StageError(f"Missing taxonomy catalog: {path}")
    payload = read_json(path)
    if not isinstance(payload, list):
        raise StageError(f"Taxonomy catalog must be a JSON array: {path}")

    catalog: dict[str, CatalogEntry] = {}
    for item in payload:
        entry = _entry_from_dict(item) if isinstance(item, dict) else None
        if entry is not None and entry.number not in catalog:
            catalog[entry.number] = entry
    return catalog


def _parse_catalog_item(item: Tag, base_url: str | None) -> tuple[CatalogEntry | None, str | None]:
    name = None
    number = None
    definition_url = None

    for position, node in enumerate(item.contents):
        if position == 0 and isinstance(node, NavigableString):
            name = _NAME_SUFFIX_RE.sub("", str(node))
        elif position == 1 and isinstance(node, Tag) and node.name == "b":
            number = node.get_text()
        elif position == 3 and isinstance(node, Tag) and node.name == "a" and node.get("href"):
            href = node["href"]
            definition_url = urljoin(base_url, href) if base_url else href

    if not number:
        return None, name
    return CatalogEntry(number=number, name=name, definition_url=definition_url), None


def parse_catalog_html(html: str, base_url: str | None = None) -> CatalogBuild:
    document = BeautifulSoup(html, "html.parser")
    entries: list[CatalogEntry] = []
    skipped: list[str] = []
    for selector in CATALOG_ITEM_SELECTORS:
        for item in document.select(selector):
            entry, skipped_name = _parse_catalog_item(item, base_url)
            if entry is not None:
                entries.append(entry)
            else:
                skipped.append(skipped_name or "")
    return CatalogBuild(entries=entries, skipped=skipped)


def write_catalog(path: Path, entries: list[CatalogEntry]) -> Path:
    write_json(path, [entry.to_dict() for entry in entries], sort_keys=False)
    return path
