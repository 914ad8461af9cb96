"""Name/gender header block parsing.

The block is one run of text such as
``Jane Doe M.D. Gender: Female NPI: 1669591962 Last Updated: 2020-01-01``
where each label introduces the value that follows it and the remaining text
is the display name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from npi_scraper.common.text import squash_whitespace

NAME_BLOCK_FIELDS = {
    "gender:": "gender",
    "npi:": "npi",
    "last updated:": "last_updated",
    "other name:": "other_name",
    "doing business as:": "doing_business_as",
    "organization subpart:": "organization_subpart",
}
NAME_BLOCK_LABEL_RE = re.compile(
    "(" + "|".join(re.escape(label) for label in NAME_BLOCK_FIELDS) + ")",
    re.IGNORECASE,
)


@dataclass
class NameBlock:
    name: str | None = None
    gender: str | None = None
    npi: str | None = None
    last_updated: str | None = None
    other_name: str | None = None
    doing_business_as: str | None = None
    organization_subpart: str | None = None


def parse_name_block(text: str) -> NameBlock:
    block = NameBlock()
    segments = NAME_BLOCK_LABEL_RE.split(squash_whitespace(text))

    index = 0
    while index < len(segments):
        segment = segments[index]
        attr = NAME_BLOCK_FIELDS.get(segment.lower())
        if attr is not None:
            index += 1
            if index < len(segments):
                setattr(block, attr, segments[index].strip())
        elif segment.strip():
            block.name = segment.strip()
        index += 1

    return block
