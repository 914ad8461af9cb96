"""CLI entrypoint for the NPI registry provider-view scraper."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from npi_scraper.common.config_loader import load_settings
from npi_scraper.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from npi_scraper.common.errors import PipelineError, StageError
from npi_scraper.common.fs import read_text
from npi_scraper.common.http import HttpClient, RetryConfig, TimeoutConfig
from npi_scraper.common.ids import generate_run_id
from npi_scraper.common.logging import build_logger, log_event
from npi_scraper.pipeline.catalog import load_catalog, parse_catalog_html, write_catalog
from npi_scraper.pipeline.crawl import CrawlResult, run_crawl
from npi_scraper.pipeline.export import write_outputs
from npi_scraper.pipeline.fetch import fetch_provider_page, parse_document
from npi_scraper.pipeline.inputs import load_identifiers, normalise_identifiers
from npi_scraper.pipeline.reports import write_run_summary


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--npi", action="append", default=None, help="NPI to crawl (repeatable)")
    parser.add_argument("--html", action="append", default=None, help="Saved provider page (repeatable)")
    parser.add_argument("--source-html", default=None, help="NUCC code-set page for build-catalog")
    parser.add_argument("--base-url", default=None, help="Base URL for relative definition links")
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def build_http_client(registry: dict) -> HttpClient:
    return HttpClient(
        timeout=TimeoutConfig(
            connect=float(registry["timeout"]["connect"]),
            read=float(registry["timeout"]["read"]),
        ),
        retry=RetryConfig(
            max_attempts=int(registry["retry"]["max_attempts"]),
            multiplier=float(registry["retry"]["multiplier"]),
            max_wait=float(registry["retry"]["max_wait"]),
        ),
        rate_per_sec=float(registry["rate_per_sec"]),
    )


def run_build_catalog(args: argparse.Namespace, settings: dict, data_dir: Path, logger: logging.Logger, run_id: str) -> int:
    if not args.source_html:
        raise StageError("build-catalog requires --source-html")
    build = parse_catalog_html(read_text(Path(args.source_html)), base_url=args.base_url)
    out_path = write_catalog(data_dir / "in" / settings["inputs"]["catalog_filename"], build.entries)
    log_event(
        logger,
        f"catalog written to {out_path} ({len(build.skipped)} items without a code skipped)",
        run_id=run_id,
        stage="build-catalog",
        event="CATALOG_WRITTEN",
        status="ok",
        rows_in=len(build.entries) + len(build.skipped),
        rows_out=len(build.entries),
    )
    return EXIT_SUCCESS


def _run_extraction(
    args: argparse.Namespace,
    settings: dict,
    data_dir: Path,
    logger: logging.Logger,
    run_id: str,
    *,
    http_client: HttpClient | None,
) -> CrawlResult:
    catalog_path = data_dir / "in" / settings["inputs"]["catalog_filename"]
    limit = args.limit if args.limit is not None else settings["crawl"]["limit"]
    max_workers = int(settings["crawl"]["max_workers"])

    if args.command == "extract":
        if not args.html:
            raise StageError("extract requires at least one --html path")
        catalog = load_catalog(catalog_path) if catalog_path.exists() else {}
        return run_crawl(
            normalise_identifiers(args.html, limit=limit),
            lambda path: parse_document(read_text(Path(path))),
            catalog,
            max_workers=max_workers,
            logger=logger,
            run_id=run_id,
            key_by_page=True,
        )

    if args.npi:
        identifiers = normalise_identifiers(args.npi, limit=limit)
    else:
        identifiers = load_identifiers(data_dir / "in" / settings["inputs"]["identifiers_filename"], limit=limit)
    catalog = load_catalog(catalog_path)
    url_template = settings["registry"]["url_template"]

    owns_client = http_client is None
    client = http_client or build_http_client(settings["registry"])
    try:
        return run_crawl(
            identifiers,
            lambda npi: fetch_provider_page(client, npi, url_template),
            catalog,
            max_workers=max_workers,
            logger=logger,
            run_id=run_id,
        )
    finally:
        if owns_client:
            client.close()


def run_command(args: argparse.Namespace, *, http_client: HttpClient | None = None) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    settings = load_settings(config_dir, overlay_config_dir=overlay_config_dir)

    log_event(logger, "stage start", run_id=run_id, stage=args.command, event="STAGE_START", status="ok")
    try:
        if args.command == "build-catalog":
            return run_build_catalog(args, settings, data_dir, logger, run_id)

        result = _run_extraction(args, settings, data_dir, logger, run_id, http_client=http_client)
    except PipelineError as exc:
        log_event(
            logger,
            f"{args.command} failed: {exc}",
            run_id=run_id,
            stage=args.command,
            event="STAGE_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    export = write_outputs(settings["output"], data_dir, result.rows, result.errors, result.records)
    for failure in export.failures:
        log_event(
            logger,
            f"{args.command} export failed: {failure}",
            run_id=run_id,
            stage=args.command,
            event="STAGE_FAIL",
            status="error",
            error_code=failure.error_code,
        )
    write_run_summary(
        data_dir,
        run_id=run_id,
        result=result,
        command=args.command,
        failed_artifacts=[str(failure.path) for failure in export.failures],
    )
    log_event(
        logger,
        "stage end",
        run_id=run_id,
        stage=args.command,
        event="STAGE_END",
        status="error" if export.failures else "ok",
        rows_in=result.requested,
        rows_out=len(result.rows),
    )

    if export.failures:
        return EXIT_HARD_FAIL
    if result.had_failures:
        return EXIT_HARD_FAIL if args.strict else EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
