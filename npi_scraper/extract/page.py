"""Provider page extraction.

The provider view keeps its content in ``#top > .text > .container.well.span6``.
Its first child holds the name block (second ``div`` inside it) and its third
child holds the "Details" table.
"""

from __future__ import annotations

from typing import Mapping

from bs4 import BeautifulSoup, Tag

from npi_scraper.common.constants import NOT_FOUND_HEADING
from npi_scraper.common.models import CatalogEntry, RawRecord
from npi_scraper.common.text import squash_whitespace
from npi_scraper.extract.details import apply_details, parse_details
from npi_scraper.extract.dom import element_children
from npi_scraper.extract.name_block import parse_name_block

CONTENT_SELECTOR = "#top > .text > .container.well.span6"
NOT_FOUND_SELECTOR = "[id='508focusheader']"
NAME_SECTION_INDEX = 0
DETAILS_SECTION_INDEX = 2
NAME_BLOCK_INDEX = 1


def is_not_found_page(document: BeautifulSoup) -> bool:
    header = document.select_one(NOT_FOUND_SELECTOR)
    if header is None:
        return False
    return squash_whitespace(header.get_text()).strip() == NOT_FOUND_HEADING


def _section(sections: list[Tag], index: int) -> Tag | None:
    return sections[index] if index < len(sections) else None


def _name_block(section: Tag | None) -> Tag | None:
    children = element_children(section)
    if len(children) <= NAME_BLOCK_INDEX:
        return None
    node = children[NAME_BLOCK_INDEX]
    return node if node.name == "div" else None


def extract_page(document: BeautifulSoup, catalog: Mapping[str, CatalogEntry]) -> RawRecord:
    record = RawRecord()
    body = document.body or document
    sections = element_children(body.select_one(CONTENT_SELECTOR))

    name_node = _name_block(_section(sections, NAME_SECTION_INDEX))
    if name_node is not None:
        block = parse_name_block(name_node.get_text())
        record.name = block.name
        record.gender = block.gender
        record.identifier = block.npi
        record.last_updated = block.last_updated
        record.other_name = block.other_name
        record.doing_business_as = block.doing_business_as
        record.organization_subpart = block.organization_subpart

    details = parse_details(_section(sections, DETAILS_SECTION_INDEX), catalog)
    return apply_details(record, details)
