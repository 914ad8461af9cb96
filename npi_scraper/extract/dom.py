"""Small traversal helpers over BeautifulSoup trees."""

from __future__ import annotations

from bs4 import Tag


def element_children(node: Tag | None) -> list[Tag]:
    if node is None:
        return []
    return [child for child in node.children if isinstance(child, Tag)]


def child_elements(node: Tag | None, *names: str) -> list[Tag]:
    return [child for child in element_children(node) if child.name in names]


def first_child(node: Tag | None, name: str) -> Tag | None:
    children = child_elements(node, name)
    return children[0] if children else None


def table_rows(table: Tag | None, section: str = "tbody") -> list[Tag]:
    """Rows of ``table > section > tr``, or ``table > tr`` when the section is absent."""
    container = first_child(table, section)
    if container is None:
        if section != "tbody":
            return []
        container = table
    return child_elements(container, "tr")
