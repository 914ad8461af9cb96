"""Details table parsing.

Each row of the "Details" table is classified by its label cell into a row
kind, and every kind is folded into the section by one reducer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Mapping

from bs4 import Tag

from npi_scraper.common.models import Address, CatalogEntry, RawRecord, TaxonomyRecord
from npi_scraper.common.text import collapse_whitespace
from npi_scraper.extract.address import parse_address
from npi_scraper.extract.dom import child_elements, first_child, table_rows
from npi_scraper.extract.taxonomy_table import parse_taxonomy_table, select_primary

DETAILS_HEADING = "Details"
VIEW_MAP_SUFFIX = "\tView Map"


class RowKind(Enum):
    PLAIN = "plain"
    ADDRESS = "address"
    OFFICIAL = "official"
    TAXONOMY = "taxonomy"
    OPAQUE = "opaque"
    IGNORED = "ignored"


@dataclass(frozen=True)
class RowRule:
    kind: RowKind
    attr: str | None = None


ROW_RULES = {
    "npi": RowRule(RowKind.PLAIN, "npi"),
    "enumeration date": RowRule(RowKind.PLAIN, "enumeration_date"),
    "npi type": RowRule(RowKind.PLAIN, "npi_type"),
    "sole proprietor": RowRule(RowKind.PLAIN, "sole_proprietor"),
    "status": RowRule(RowKind.PLAIN, "status"),
    "mailing address": RowRule(RowKind.ADDRESS, "mailing_address"),
    "primary practice address": RowRule(RowKind.ADDRESS, "primary_practice_address"),
    "secondary practice address": RowRule(RowKind.ADDRESS, "secondary_practice_address"),
    "authorized official information": RowRule(RowKind.OFFICIAL, "authorized_official_information"),
    "taxonomy": RowRule(RowKind.TAXONOMY, "taxonomy"),
    "other identifiers": RowRule(RowKind.OPAQUE, "other_identifiers"),
}
IGNORED_ROW = RowRule(RowKind.IGNORED)


@dataclass
class DetailsSection:
    npi: str | None = None
    enumeration_date: str | None = None
    npi_type: str | None = None
    sole_proprietor: str | None = None
    status: str | None = None
    mailing_address: Address | None = None
    primary_practice_address: Address | None = None
    secondary_practice_address: Address | None = None
    authorized_official_information: str | None = None
    taxonomy: list[TaxonomyRecord] | None = None
    other_identifiers: str | None = None
    primary_taxonomy: TaxonomyRecord | None = None
    primary_taxonomy_extended: CatalogEntry | None = None
    ignored_labels: list[str] = field(default_factory=list)


def classify_row(label: str) -> RowRule:
    return ROW_RULES.get(collapse_whitespace(label).lower(), IGNORED_ROW)


def _official_information(text: str) -> str:
    value = collapse_whitespace(text, "\t")
    if value.endswith(VIEW_MAP_SUFFIX):
        value = value[: -len(VIEW_MAP_SUFFIX)]
    return value


def fold_row(
    section: DetailsSection,
    rule: RowRule,
    label: str,
    content: Tag | None,
    catalog: Mapping[str, CatalogEntry],
) -> DetailsSection:
    if rule.kind is RowKind.IGNORED or content is None:
        section.ignored_labels.append(label)
        return section

    if rule.kind is RowKind.PLAIN:
        setattr(section, rule.attr, collapse_whitespace(content.get_text()))
    elif rule.kind is RowKind.ADDRESS:
        setattr(section, rule.attr, parse_address(content))
    elif rule.kind is RowKind.OFFICIAL:
        setattr(section, rule.attr, _official_information(content.get_text()))
    elif rule.kind is RowKind.OPAQUE:
        setattr(section, rule.attr, content.get_text())
    elif rule.kind is RowKind.TAXONOMY:
        records = parse_taxonomy_table(content.find("table"))
        section.taxonomy = records
        primary = select_primary(records)
        if primary is not None and section.primary_taxonomy is None:
            section.primary_taxonomy = primary
            code = primary.number.number if primary.number is not None else None
            section.primary_taxonomy_extended = catalog.get(code) if code else None
    return section


def parse_details(section_node: Tag | None, catalog: Mapping[str, CatalogEntry]) -> DetailsSection:
    section = DetailsSection()
    heading = first_child(section_node, "h2")
    if heading is None or heading.get_text() != DETAILS_HEADING:
        return section

    for row in table_rows(first_child(section_node, "table")):
        cells = child_elements(row, "td", "th")
        if not cells:
            continue
        label = cells[0].get_text()
        content = cells[1] if len(cells) > 1 else None
        fold_row(section, classify_row(label), collapse_whitespace(label), content, catalog)

    return section


def apply_details(record: RawRecord, section: DetailsSection) -> RawRecord:
    """Copy every value the section found onto the record."""
    for item in fields(section):
        if item.name == "ignored_labels":
            continue
        value = getattr(section, item.name)
        if value is None:
            continue
        if item.name == "npi":
            record.identifier = value
        else:
            setattr(record, item.name, value)
    return record
