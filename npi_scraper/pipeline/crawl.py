"""Crawl orchestration with fail-soft semantics per identifier."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Mapping

from bs4 import BeautifulSoup

from npi_scraper.common.errors import PipelineError
from npi_scraper.common.logging import log_event
from npi_scraper.common.models import CatalogEntry, ErrorRow, OutputRow, RawRecord
from npi_scraper.common.time_utils import elapsed_ms
from npi_scraper.extract.page import extract_page
from npi_scraper.pipeline.format import format_record

DocumentLoader = Callable[[str], BeautifulSoup]

UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


@dataclass
class CrawlResult:
    requested: int = 0
    rows: list[OutputRow] = field(default_factory=list)
    records: list[RawRecord] = field(default_factory=list)
    errors: list[ErrorRow] = field(default_factory=list)

    @property
    def had_failures(self) -> bool:
        return bool(self.errors)


def _outcome_key(source: str, record: RawRecord | None, key_by_page: bool) -> str:
    if key_by_page and record is not None and record.identifier:
        return record.identifier
    return source


def _process_safely(
    source: str,
    load_document: DocumentLoader,
    catalog: Mapping[str, CatalogEntry],
    logger: logging.Logger | None,
    run_id: str | None,
    key_by_page: bool,
) -> tuple[RawRecord, OutputRow] | ErrorRow:
    started_at = time.monotonic()
    record: RawRecord | None = None
    try:
        record = extract_page(load_document(source), catalog)
        row = format_record(record)
    except PipelineError as exc:
        error_code, message = exc.error_code, str(exc)
    except Exception as exc:
        error_code, message = UNEXPECTED_ERROR, f"{type(exc).__name__}: {exc}"
    else:
        error_code = message = None

    npi = _outcome_key(source, record, key_by_page)
    outcome: tuple[RawRecord, OutputRow] | ErrorRow
    if error_code is not None:
        outcome = ErrorRow(npi=npi, error_code=error_code, error=message)
    else:
        outcome = (record, row)

    if logger is not None:
        if isinstance(outcome, ErrorRow):
            log_event(
                logger,
                f"failed {source}: {outcome.error}",
                run_id=run_id,
                stage="crawl",
                npi=npi,
                event="NPI_FAIL",
                status="error",
                duration_ms=elapsed_ms(started_at),
                error_code=outcome.error_code,
            )
        else:
            log_event(
                logger,
                f"extracted {source}: {outcome[1].name}",
                run_id=run_id,
                stage="crawl",
                npi=npi,
                event="NPI_OK",
                status="ok",
                duration_ms=elapsed_ms(started_at),
            )
    return outcome


def run_crawl(
    identifiers: list[str],
    load_document: DocumentLoader,
    catalog: Mapping[str, CatalogEntry],
    *,
    max_workers: int = 1,
    logger: logging.Logger | None = None,
    run_id: str | None = None,
    key_by_page: bool = False,
) -> CrawlResult:
    """Process every identifier, keeping input order.

    ``identifiers`` are whatever ``load_document`` accepts: NPIs for a crawl,
    file paths for offline extraction. With ``key_by_page`` the error rows
    and log events carry the NPI read from the page when one was found, and
    fall back to the identifier otherwise.
    """
    result = CrawlResult(requested=len(identifiers))
    if not identifiers:
        return result

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        outcomes = list(
            pool.map(
                lambda source: _process_safely(source, load_document, catalog, logger, run_id, key_by_page),
                identifiers,
            )
        )

    for outcome in outcomes:
        if isinstance(outcome, ErrorRow):
            result.errors.append(outcome)
        else:
            record, row = outcome
            result.records.append(record)
            result.rows.append(row)
    return result
