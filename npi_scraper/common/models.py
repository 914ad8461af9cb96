"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from npi_scraper.common.text import strip_all_whitespace


@dataclass
class TaxonomyNumber:
    number: str | None = None
    field: str | None = None
    group_number: str | None = None
    group: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "field": self.field,
            "groupNumber": self.group_number,
            "group": self.group,
        }


@dataclass
class TaxonomyRecord:
    """One row of a provider's taxonomy table.

    ``number`` is only set when the table had a "Selected Taxonomy" column;
    its sub-fields stay ``None`` when the code could not be parsed.
    """

    primary_taxonomy: str | None = None
    selected_taxonomy: str | None = None
    state: str | None = None
    license_number: str | None = None
    number: TaxonomyNumber | None = None
    extra: dict[str, str] = field(default_factory=dict)

    def is_primary(self) -> bool:
        if self.primary_taxonomy is None:
            return False
        return strip_all_whitespace(self.primary_taxonomy) == "Yes"

    def is_empty(self) -> bool:
        values = (self.primary_taxonomy, self.selected_taxonomy, self.state, self.license_number)
        return all(value is None for value in values) and self.number is None and not self.extra

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update(
            {
                "primaryTaxonomy": self.primary_taxonomy,
                "selectedTaxonomy": self.selected_taxonomy,
                "state": self.state,
                "licenseNumber": self.license_number,
                "number": self.number.to_dict() if self.number is not None else None,
            }
        )
        return out


@dataclass
class ContactInfo:
    phone: str | None = None
    fax: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"phone": self.phone, "fax": self.fax}


@dataclass
class Address:
    line1: str | None = None
    line2: str | None = None
    line3: str | None = None
    contact_info: ContactInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "line1": self.line1,
            "line2": self.line2,
            "line3": self.line3,
            "contactInfo": self.contact_info.to_dict() if self.contact_info is not None else None,
        }


@dataclass(frozen=True)
class CatalogEntry:
    number: str
    name: str | None
    definition_url: str | None

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "name": self.name, "definitionUrl": self.definition_url}


def _dump(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass
class RawRecord:
    """Everything extracted from one provider page, before flattening."""

    identifier: str | None = None
    name: str | None = None
    gender: str | None = None
    last_updated: str | None = None
    other_name: str | None = None
    doing_business_as: str | None = None
    organization_subpart: str | None = None
    enumeration_date: str | None = None
    npi_type: str | None = None
    sole_proprietor: str | None = None
    status: str | None = None
    mailing_address: Address | None = None
    primary_practice_address: Address | None = None
    secondary_practice_address: Address | None = None
    authorized_official_information: str | None = None
    taxonomy: list[TaxonomyRecord] = field(default_factory=list)
    other_identifiers: str | None = None
    primary_taxonomy: TaxonomyRecord | None = None
    primary_taxonomy_extended: CatalogEntry | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "npi": self.identifier,
            "name": self.name,
            "gender": self.gender,
            "lastUpdated": self.last_updated,
            "otherName": self.other_name,
            "doingBusinessAs": self.doing_business_as,
            "organizationSubpart": self.organization_subpart,
            "enumerationDate": self.enumeration_date,
            "npiType": self.npi_type,
            "soleProprietor": self.sole_proprietor,
            "status": self.status,
            "mailingAddress": _dump(self.mailing_address),
            "primaryPracticeAddress": _dump(self.primary_practice_address),
            "secondaryPracticeAddress": _dump(self.secondary_practice_address),
            "authorizedOfficialInformation": self.authorized_official_information,
            "taxonomy": _dump(self.taxonomy),
            "otherIdentifiers": self.other_identifiers,
            "primaryTaxonomy": _dump(self.primary_taxonomy),
            "primaryTaxonomyExtended": _dump(self.primary_taxonomy_extended),
        }


# (attribute, column header) in output order.
OUTPUT_COLUMNS = (
    ("npi", "npi"),
    ("name", "name"),
    ("gender", "gender"),
    ("taxonomy_group_number", "taxonomyGroupNumber"),
    ("taxonomy_group", "taxonomyGroup"),
    ("taxonomy_number", "taxonomyNumber"),
    ("taxonomy_field", "taxonomyField"),
    ("taxonomy_state", "taxonomyState"),
    ("taxonomy_license_number", "taxonomyLicenseNumber"),
    ("taxonomy_original_value", "taxonomyOriginalValue"),
    ("address_line1", "addressLine1"),
    ("address_line2", "addressLine2"),
    ("address_line3", "addressLine3"),
    ("phone", "phone"),
    ("fax", "fax"),
)
OUTPUT_HEADERS = [header for _attr, header in OUTPUT_COLUMNS]


@dataclass(frozen=True)
class OutputRow:
    npi: str | None
    name: str | None
    gender: str | None
    taxonomy_group_number: str | None
    taxonomy_group: str | None
    taxonomy_number: str | None
    taxonomy_field: str | None
    taxonomy_state: str | None
    taxonomy_license_number: str | None
    taxonomy_original_value: str | None
    address_line1: str | None
    address_line2: str | None
    address_line3: str | None
    phone: str | None
    fax: str | None

    def to_dict(self) -> dict[str, Any]:
        return {header: getattr(self, attr) for attr, header in OUTPUT_COLUMNS}


ERROR_HEADERS = ["npi", "error_code", "error"]


@dataclass(frozen=True)
class ErrorRow:
    npi: str
    error_code: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}
