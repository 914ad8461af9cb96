"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from npi_scraper.common.constants import OUTPUT_FORMATS
from npi_scraper.common.errors import ConfigError


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    _assert_mapping(obj, ctx)
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_settings(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"registry", "inputs", "crawl", "output"}
    _assert_required_keys(cfg, top_required, "settings")
    _assert_no_unknown_keys(cfg, top_required, "settings", allow_unknown)

    registry = cfg["registry"]
    _assert_required_keys(registry, {"url_template", "rate_per_sec", "timeout", "retry"}, "registry")
    if "{npi}" not in str(registry["url_template"]):
        raise ConfigError("registry.url_template must contain an {npi} placeholder")
    _assert_positive(registry["rate_per_sec"], "registry.rate_per_sec")
    _assert_required_keys(registry["timeout"], {"connect", "read"}, "registry.timeout")
    _assert_required_keys(
        registry["retry"],
        {"max_attempts", "multiplier", "max_wait"},
        "registry.retry",
    )

    _assert_required_keys(cfg["inputs"], {"identifiers_filename", "catalog_filename"}, "inputs")

    crawl = cfg["crawl"]
    _assert_required_keys(crawl, {"max_workers", "limit"}, "crawl")
    _assert_positive(crawl["max_workers"], "crawl.max_workers")
    if crawl["limit"] is not None:
        _assert_positive(crawl["limit"], "crawl.limit")

    output = cfg["output"]
    _assert_required_keys(
        output, {"basename", "errors_basename", "records_basename", "formats", "csv_delimiter"}, "output"
    )
    if not isinstance(output["formats"], list) or not output["formats"]:
        raise ConfigError("output.formats must be a non-empty list")
    unsupported = set(output["formats"]) - set(OUTPUT_FORMATS)
    if unsupported:
        raise ConfigError(f"Unsupported output formats: {', '.join(sorted(unsupported))}")
    if not isinstance(output["csv_delimiter"], str) or len(output["csv_delimiter"]) != 1:
        raise ConfigError("output.csv_delimiter must be a single character")

    return cfg
