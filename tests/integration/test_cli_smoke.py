from __future__ import annotations

import csv
import json
import shutil
from pathlib import Path

import pytest
from openpyxl import load_workbook

from npi_scraper.cli import parse_args, run_command
from npi_scraper.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from npi_scraper.common.errors import PageNotFoundError
from npi_scraper.common.fs import write_xlsx
from npi_scraper.pipeline import export

REPO_ROOT = Path(__file__).resolve().parents[2]
FIXTURES = REPO_ROOT / "tests" / "fixtures"
NOT_FOUND_PAGE = '<html><body><h1 id="508focusheader">404 Page Not Found</h1></body></html>'


class FakeClient:
    def __init__(self, pages: dict[str, str]):
        self.pages = pages
        self.urls: list[str] = []

    def get_text(self, url: str, **_kwargs) -> str:
        self.urls.append(url)
        npi = url.rstrip("/").rsplit("/", 1)[-1]
        if npi not in self.pages:
            raise PageNotFoundError()
        return self.pages[npi]

    def close(self) -> None:
        pass


def _data_dir(tmp_path: Path, npis: list) -> Path:
    data_dir = tmp_path / "data"
    (data_dir / "in").mkdir(parents=True)
    shutil.copy(FIXTURES / "taxonomies.json", data_dir / "in" / "taxonomies.json")
    (data_dir / "in" / "npis.json").write_text(json.dumps(npis), encoding="utf-8")
    return data_dir


def _args(command: str, data_dir: Path, *extra: str):
    return parse_args(
        [command, "--config-dir", str(REPO_ROOT / "config"), "--data-dir", str(data_dir), "--run-id", "run-test", *extra]
    )


@pytest.mark.integration
def test_cli_crawl_generates_expected_artifacts(tmp_path: Path):
    data_dir = _data_dir(tmp_path, [1669591962, 1111111111])
    client = FakeClient(
        {
            "1669591962": (FIXTURES / "provider_view.html").read_text(encoding="utf-8"),
            "1111111111": NOT_FOUND_PAGE,
        }
    )

    exit_code = run_command(_args("crawl", data_dir), http_client=client)

    assert exit_code == EXIT_PARTIAL
    assert client.urls[0] == "https://npiregistry.cms.hhs.gov/registry/provider-view/1669591962"
    for name in ("output", "errors"):
        for fmt in ("json", "xlsx", "csv"):
            assert (data_dir / "out" / f"{name}.{fmt}").exists()
    records = json.loads((data_dir / "out" / "records.json").read_text(encoding="utf-8"))
    assert [record["npi"] for record in records] == ["1669591962"]
    assert records[0]["primaryTaxonomyExtended"]["name"] == "Family Medicine"

    output = json.loads((data_dir / "out" / "output.json").read_text(encoding="utf-8"))
    assert [row["taxonomyNumber"] for row in output] == ["207Q00000X"]
    errors = json.loads((data_dir / "out" / "errors.json").read_text(encoding="utf-8"))
    assert errors == [{"npi": "1111111111", "error_code": "NOT_FOUND", "error": "404 Page Not Found"}]

    with (data_dir / "out" / "output.csv").open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f, delimiter=";"))
    assert rows[0]["taxonomyState"] == "NC"
    assert rows[0]["taxonomyGroup"] == ""

    summary = json.loads((data_dir / "out" / "reports" / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["status"] == "partial"
    assert summary["totals"] == {"requested": 2, "succeeded": 1, "failed": 1}
    assert summary["error_codes"] == {"NOT_FOUND": 1}
    assert (data_dir / "run_meta" / "run-test.log.jsonl").exists()


@pytest.mark.integration
def test_cli_crawl_strict_turns_partial_into_hard_fail(tmp_path: Path):
    data_dir = _data_dir(tmp_path, [])
    exit_code = run_command(_args("crawl", data_dir, "--npi", "1111111111", "--strict"), http_client=FakeClient({}))
    assert exit_code == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_crawl_empty_input_still_writes_both_artifacts(tmp_path: Path):
    data_dir = _data_dir(tmp_path, [])
    exit_code = run_command(_args("crawl", data_dir), http_client=FakeClient({}))

    assert exit_code == EXIT_SUCCESS
    assert json.loads((data_dir / "out" / "output.json").read_text(encoding="utf-8")) == []
    assert json.loads((data_dir / "out" / "errors.json").read_text(encoding="utf-8")) == []


@pytest.mark.integration
def test_cli_crawl_missing_catalog_is_hard_fail(tmp_path: Path):
    data_dir = _data_dir(tmp_path, [1669591962])
    (data_dir / "in" / "taxonomies.json").unlink()
    assert run_command(_args("crawl", data_dir), http_client=FakeClient({})) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_build_catalog(tmp_path: Path):
    data_dir = tmp_path / "data"
    exit_code = run_command(
        _args(
            "build-catalog",
            data_dir,
            "--source-html",
            str(FIXTURES / "nucc_code_set.html"),
            "--base-url",
            "http://codelists.wpc-edi.com/",
        )
    )

    assert exit_code == EXIT_SUCCESS
    catalog = json.loads((data_dir / "in" / "taxonomies.json").read_text(encoding="utf-8"))
    assert [item["number"] for item in catalog] == ["207RC0000X", "207Q00000X"]
    assert catalog[1]["definitionUrl"] == "http://codelists.wpc-edi.com/nucc_properties.asp?IndexID=1001"


def _extract_args(data_dir: Path, *pages: Path):
    html_args = [arg for page in pages for arg in ("--html", str(page))]
    return _args("extract", data_dir, *html_args)


def _log_lines(data_dir: Path) -> list[dict]:
    log_path = data_dir / "run_meta" / "run-test.log.jsonl"
    return [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines() if line.strip()]


@pytest.mark.integration
def test_cli_extract_strips_control_characters_from_xlsx(tmp_path: Path):
    data_dir = _data_dir(tmp_path, [])
    page = tmp_path / "provider_view.html"
    html = (FIXTURES / "provider_view.html").read_text(encoding="utf-8")
    page.write_text(html.replace("JANE Q DOE", "JANE Q\x01DOE"), encoding="utf-8")
    missing = tmp_path / "nonexistent.html"

    exit_code = run_command(_extract_args(data_dir, page, missing))

    assert exit_code == EXIT_PARTIAL
    for name in ("output", "errors"):
        for fmt in ("json", "xlsx", "csv"):
            assert (data_dir / "out" / f"{name}.{fmt}").exists()
    assert (data_dir / "out" / "reports" / "run_summary.json").exists()

    output = json.loads((data_dir / "out" / "output.json").read_text(encoding="utf-8"))
    assert output[0]["name"] == "JANE Q\x01DOE M.D."
    sheet = load_workbook(data_dir / "out" / "output.xlsx").active
    assert sheet.cell(row=2, column=2).value == "JANE QDOE M.D."

    errors = json.loads((data_dir / "out" / "errors.json").read_text(encoding="utf-8"))
    assert [(error["npi"], error["error_code"]) for error in errors] == [(str(missing), "UNEXPECTED_ERROR")]
    assert not [line for line in _log_lines(data_dir) if line["event"] == "STAGE_FAIL"]


@pytest.mark.integration
def test_cli_export_failure_is_logged_and_other_artifacts_still_written(tmp_path: Path, monkeypatch):
    def failing_write_xlsx(path, headers, rows):
        if path.name == "output.xlsx":
            raise ValueError("cannot be used in worksheets")
        write_xlsx(path, headers, rows)

    monkeypatch.setattr(export, "write_xlsx", failing_write_xlsx)
    data_dir = _data_dir(tmp_path, [])

    exit_code = run_command(_extract_args(data_dir, FIXTURES / "provider_view.html"))

    assert exit_code == EXIT_HARD_FAIL
    assert not (data_dir / "out" / "output.xlsx").exists()
    for path in ("output.json", "output.csv", "errors.json", "errors.xlsx", "errors.csv", "records.json"):
        assert (data_dir / "out" / path).exists()

    summary = json.loads((data_dir / "out" / "reports" / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["status"] == "success"
    assert summary["failed_artifacts"] == [str(data_dir / "out" / "output.xlsx")]

    failures = [line for line in _log_lines(data_dir) if line["event"] == "STAGE_FAIL"]
    assert len(failures) == 1
    assert failures[0]["error_code"] == "EXPORT_ERROR"
    assert "output.xlsx" in failures[0]["message"]


@pytest.mark.integration
def test_cli_extract_keys_errors_by_page_npi(tmp_path: Path):
    data_dir = _data_dir(tmp_path, [])
    page = tmp_path / "no_primary.html"
    html = (FIXTURES / "provider_view.html").read_text(encoding="utf-8")
    page.write_text(html.replace("Yes", "No"), encoding="utf-8")

    assert run_command(_extract_args(data_dir, page)) == EXIT_PARTIAL

    errors = json.loads((data_dir / "out" / "errors.json").read_text(encoding="utf-8"))
    assert errors == [{"npi": "1669591962", "error_code": "MISSING_PRIMARY_TAXONOMY", "error": "No primary taxonomy"}]
    fail_events = [line for line in _log_lines(data_dir) if line["event"] == "NPI_FAIL"]
    assert fail_events[0]["npi"] == "1669591962"
    assert str(page) in fail_events[0]["message"]
