"""Identifier list loading."""

from __future__ import annotations

from pathlib import Path

from npi_scraper.common.errors import StageError
from npi_scraper.common.fs import read_json


def normalise_identifiers(values, limit: int | None = None) -> list[str]:
    identifiers = [str(value).strip() for value in values if str(value).strip()]
    if limit is not None:
        identifiers = identifiers[:limit]
    return identifiers


def load_identifiers(path: Path, limit: int | None = None) -> list[str]:
    if not path.exists():
        raise StageError(f"Missing identifier list: {path}")
    payload = read_json(path)
    if not isinstance(payload, list):
        raise StageError(f"Identifier list must be a JSON array: {path}")
    return normalise_identifiers(payload, limit=limit)
