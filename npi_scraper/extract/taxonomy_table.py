"""Provider taxonomy table parsing."""

from __future__ import annotations

from bs4 import Tag

from npi_scraper.common.models import TaxonomyRecord
from npi_scraper.common.text import camel_case_key
from npi_scraper.extract.dom import child_elements, table_rows
from npi_scraper.extract.taxonomy_grammar import parse_compound

SELECTED_TAXONOMY_KEY = "selectedTaxonomy"
RECORD_ATTRIBUTES = {
    "primaryTaxonomy": "primary_taxonomy",
    SELECTED_TAXONOMY_KEY: "selected_taxonomy",
    "state": "state",
    "licenseNumber": "license_number",
}


def header_keys(table: Tag) -> list[str]:
    keys: list[str] = []
    rows = table_rows(table, "thead") or table_rows(table, "tbody")[:1]
    for row in rows:
        keys.extend(camel_case_key(cell.get_text()) for cell in child_elements(row, "th"))
    return keys


def parse_taxonomy_row(row: Tag, keys: list[str]) -> TaxonomyRecord:
    record = TaxonomyRecord()
    for index, cell in enumerate(child_elements(row, "td")):
        if index >= len(keys) or not keys[index]:
            continue
        key = keys[index]
        text = cell.get_text()

        attr = RECORD_ATTRIBUTES.get(key)
        if attr is None:
            record.extra[key] = text
        else:
            setattr(record, attr, text)

        if key == SELECTED_TAXONOMY_KEY:
            record.number = parse_compound(text)
    return record


def parse_taxonomy_table(table: Tag | None) -> list[TaxonomyRecord]:
    if table is None:
        return []
    keys = header_keys(table)
    return [
        parse_taxonomy_row(row, keys)
        for row in table_rows(table, "tbody")
        if child_elements(row, "td")
    ]


def select_primary(records: list[TaxonomyRecord]) -> TaxonomyRecord | None:
    """First record flagged primary; later "Yes" rows are ignored."""
    for record in records:
        if record.is_primary():
            return record
    return None
