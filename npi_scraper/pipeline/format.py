"""Flatten an extracted record into the fixed output row."""

from __future__ import annotations

from npi_scraper.common.errors import MissingPrimaryTaxonomy
from npi_scraper.common.models import Address, ContactInfo, OutputRow, RawRecord, TaxonomyNumber


def format_record(record: RawRecord) -> OutputRow:
    primary = record.primary_taxonomy
    if primary is None or primary.is_empty():
        raise MissingPrimaryTaxonomy()

    number = primary.number or TaxonomyNumber()
    address = record.primary_practice_address or Address()
    contact = address.contact_info or ContactInfo()

    return OutputRow(
        npi=record.identifier,
        name=record.name,
        gender=record.gender,
        taxonomy_group_number=number.group_number,
        taxonomy_group=number.group,
        taxonomy_number=number.number,
        taxonomy_field=number.field,
        taxonomy_state=primary.state,
        taxonomy_license_number=primary.license_number,
        taxonomy_original_value=primary.selected_taxonomy,
        address_line1=address.line1,
        address_line2=address.line2,
        address_line3=address.line3,
        phone=contact.phone,
        fax=contact.fax,
    )
