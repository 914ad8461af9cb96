import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from npi_scraper.common.errors import StageError
from npi_scraper.common.fs import write_xlsx
from npi_scraper.common.ids import generate_run_id
from npi_scraper.common.text import camel_case_key, collapse_whitespace, squash_whitespace, strip_all_whitespace
from npi_scraper.pipeline.fetch import provider_url
from npi_scraper.pipeline.inputs import load_identifiers, normalise_identifiers


def test_collapse_whitespace_keeps_single_spaces():
    assert collapse_whitespace("\n   NPI-1 Individual \n  ") == "NPI-1 Individual"
    assert collapse_whitespace("a  \n  b", "\t") == "a\tb"


def test_squash_whitespace_drops_line_breaks():
    assert squash_whitespace("JANE\n   DOE  M.D.") == "JANE DOE M.D."
    assert strip_all_whitespace(" Y e s\n") == "Yes"


@pytest.mark.parametrize(
    ("label", "key"),
    [
        ("Primary Taxonomy", "primaryTaxonomy"),
        ("Selected Taxonomy", "selectedTaxonomy"),
        ("  License Number ", "licenseNumber"),
        ("State", "state"),
        ("NPI", "npi"),
        ("", ""),
    ],
)
def test_camel_case_key(label, key):
    assert camel_case_key(label) == key


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("run-")


def test_provider_url_template():
    assert provider_url("1669591962").endswith("/registry/provider-view/1669591962")
    assert provider_url("1", "https://example.test/{npi}/view") == "https://example.test/1/view"


def test_normalise_identifiers_stringifies_and_limits():
    assert normalise_identifiers([1669591962, " 1234567893 ", ""], limit=None) == ["1669591962", "1234567893"]
    assert normalise_identifiers([1, 2, 3], limit=2) == ["1", "2"]


def test_load_identifiers(tmp_path: Path):
    path = tmp_path / "npis.json"
    path.write_text(json.dumps([1669591962, "1234567893"]), encoding="utf-8")
    assert load_identifiers(path) == ["1669591962", "1234567893"]

    with pytest.raises(StageError):
        load_identifiers(tmp_path / "missing.json")

    path.write_text(json.dumps({"npis": []}), encoding="utf-8")
    with pytest.raises(StageError):
        load_identifiers(path)


def test_write_xlsx_writes_header_then_rows(tmp_path: Path):
    path = tmp_path / "out" / "output.xlsx"
    write_xlsx(path, ["npi", "name"], [{"npi": "1", "name": "A"}, {"npi": "2", "name": None}])

    sheet = load_workbook(path).active
    assert [list(row) for row in sheet.iter_rows(values_only=True)] == [["npi", "name"], ["1", "A"], ["2", None]]


def test_write_xlsx_drops_control_characters(tmp_path: Path):
    path = tmp_path / "out" / "output.xlsx"
    write_xlsx(path, ["npi", "name"], [{"npi": "1", "name": "JANE Q\x01DOE\x0b"}])

    sheet = load_workbook(path).active
    assert sheet.cell(row=2, column=2).value == "JANE QDOE"
