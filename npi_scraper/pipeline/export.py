"""Output and error artifact export."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from npi_scraper.common.errors import ExportError
from npi_scraper.common.fs import write_csv, write_json, write_xlsx
from npi_scraper.common.models import ERROR_HEADERS, OUTPUT_HEADERS, ErrorRow, OutputRow, RawRecord


@dataclass
class ExportResult:
    written: list[Path] = field(default_factory=list)
    failures: list[ExportError] = field(default_factory=list)


def _serialize_row(row: dict, headers: list[str]) -> dict:
    return {key: row.get(key) for key in headers}


def _write_artifact(path: Path, fmt: str, headers: list[str], rows: list[dict], csv_delimiter: str) -> None:
    if fmt == "json":
        write_json(path, rows, sort_keys=False)
    elif fmt == "xlsx":
        write_xlsx(path, headers, rows)
    elif fmt == "csv":
        csv_rows = [{key: "" if value is None else value for key, value in row.items()} for row in rows]
        write_csv(path, headers, csv_rows, delimiter=csv_delimiter)
    else:
        raise ValueError(f"Unknown output format: {fmt}")


def write_table(
    out_dir: Path,
    basename: str,
    headers: list[str],
    rows: list[dict],
    *,
    formats: list[str],
    csv_delimiter: str = ";",
    result: ExportResult | None = None,
) -> ExportResult:
    """Write one table in every format; a failing format does not stop the others."""
    result = result if result is not None else ExportResult()
    serialized_rows = [_serialize_row(row, headers) for row in rows]
    for fmt in formats:
        path = out_dir / f"{basename}.{fmt}"
        try:
            _write_artifact(path, fmt, headers, serialized_rows, csv_delimiter)
        except Exception as exc:
            result.failures.append(ExportError(path, f"{type(exc).__name__}: {exc}"))
        else:
            result.written.append(path)
    return result


def write_records(path: Path, records: list[RawRecord], *, result: ExportResult | None = None) -> ExportResult:
    """Write the nested per-page records as JSON, keyed like the registry page."""
    result = result if result is not None else ExportResult()
    try:
        write_json(path, [record.to_dict() for record in records], sort_keys=False)
    except Exception as exc:
        result.failures.append(ExportError(path, f"{type(exc).__name__}: {exc}"))
    else:
        result.written.append(path)
    return result


def write_outputs(
    output_config: dict,
    data_dir: Path,
    rows: list[OutputRow],
    errors: list[ErrorRow],
    records: list[RawRecord] | None = None,
) -> ExportResult:
    out_dir = data_dir / "out"
    formats = list(output_config["formats"])
    delimiter = output_config["csv_delimiter"]

    result = write_table(
        out_dir,
        output_config["basename"],
        OUTPUT_HEADERS,
        [row.to_dict() for row in rows],
        formats=formats,
        csv_delimiter=delimiter,
    )
    write_table(
        out_dir,
        output_config["errors_basename"],
        ERROR_HEADERS,
        [error.to_dict() for error in errors],
        formats=formats,
        csv_delimiter=delimiter,
        result=result,
    )
    if records is not None:
        write_records(out_dir / f"{output_config['records_basename']}.json", records, result=result)
    return result
