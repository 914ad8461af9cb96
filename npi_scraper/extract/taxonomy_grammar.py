"""Taxonomy code grammar for "Selected Taxonomy" cells.

A line reads ``<nine upper-case alphanumerics>X <optional "-"> <label>``, e.g.
``207Q00000X - Family Medicine``. A cell holds either one such line (the leaf
code) or two: the group line followed by the leaf line.
"""

from __future__ import annotations

import re

from npi_scraper.common.models import TaxonomyNumber
from npi_scraper.common.text import collapse_whitespace

TAXONOMY_LINE_RE = re.compile(r"^([A-Z0-9]{9}X)\s-?(.*)$")


def _match_line(line: str) -> tuple[str, str] | None:
    match = TAXONOMY_LINE_RE.match(line)
    if match is None:
        return None
    return match.group(1), match.group(2).strip()


def normalise_lines(text: str) -> list[str]:
    lines = (collapse_whitespace(line) for line in text.split("\n"))
    return [line for line in lines if line]


def parse_single(text: str) -> TaxonomyNumber:
    result = TaxonomyNumber()
    matched = _match_line(collapse_whitespace(text))
    if matched is not None:
        result.number, result.field = matched
    return result


def parse_compound(text: str) -> TaxonomyNumber:
    lines = normalise_lines(text)

    if len(lines) == 1:
        return parse_single(lines[0])

    result = TaxonomyNumber()
    if len(lines) == 2:
        group = _match_line(lines[0])
        if group is not None:
            result.group_number, result.group = group
        leaf = _match_line(lines[1])
        if leaf is not None:
            result.number, result.field = leaf
    return result
