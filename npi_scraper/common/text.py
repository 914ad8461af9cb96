"""Whitespace and key normalisation shared by the page parsers."""

from __future__ import annotations

import re

_MULTI_WHITESPACE_RE = re.compile(r"\s{2,}")
_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"[\n\r]+")
_WORD_RE = re.compile(r"[A-Za-z0-9]+")


def collapse_whitespace(value: str, replacement: str = " ") -> str:
    """Replace runs of two or more whitespace characters and trim."""
    return _MULTI_WHITESPACE_RE.sub(replacement, value).strip()


def squash_whitespace(value: str) -> str:
    """Drop line breaks, then fold every whitespace run to one space."""
    return _WHITESPACE_RE.sub(" ", _LINE_BREAK_RE.sub("", value))


def strip_all_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def camel_case_key(label: str) -> str:
    words = _WORD_RE.findall(label)
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(word[:1].upper() + word[1:].lower() for word in tail)
