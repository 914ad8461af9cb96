"""Address cell and contact string parsing.

The registry renders an address cell as bare text nodes separated by ``<br>``
elements, with no labels::

    0: "123 MAIN ST"   1: <br>   2: "SUITE 4"   3: <br>   4: "RALEIGH, NC 27601"
    5: <br>   6: <br>   7: "Phone: ... | Fax: ..."

Fields are read by node position. If the template moves a node, the field
silently reads the wrong value or stays unset; the fixture test in
``tests/regression`` pins the expected shape.
"""

from __future__ import annotations

import re

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from npi_scraper.common.models import Address, ContactInfo
from npi_scraper.common.text import collapse_whitespace

ADDRESS_LINE_POSITIONS = {
    0: "line1",
    2: "line2",
    4: "line3",
}
CONTACT_INFO_POSITION = 7

CONTACT_LABEL_RE = re.compile(r"(Phone:|Fax:)")
CONTACT_FIELDS = {
    "phone:": "phone",
    "fax:": "fax",
}


def _is_text_node(node) -> bool:
    # Comments, CDATA and doctypes are NavigableString subclasses too.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def parse_contact_info(text: str) -> ContactInfo:
    info = ContactInfo()
    segments = CONTACT_LABEL_RE.split(text)

    index = 0
    while index < len(segments):
        attr = CONTACT_FIELDS.get(segments[index].lower())
        if attr is not None and index + 1 < len(segments):
            index += 1
            setattr(info, attr, segments[index].replace("|", "").strip())
        index += 1

    return info


def parse_address(cell: Tag) -> Address:
    address = Address()

    for position, node in enumerate(cell.contents):
        if not _is_text_node(node):
            continue
        attr = ADDRESS_LINE_POSITIONS.get(position)
        if attr is not None:
            setattr(address, attr, collapse_whitespace(str(node)))
        elif position == CONTACT_INFO_POSITION:
            address.contact_info = parse_contact_info(collapse_whitespace(str(node), "\t"))

    return address
