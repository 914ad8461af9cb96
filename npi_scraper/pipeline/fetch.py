"""Provider page fetching."""

from __future__ import annotations

from bs4 import BeautifulSoup

from npi_scraper.common.constants import REGISTRY_URL_TEMPLATE
from npi_scraper.common.errors import PageNotFoundError
from npi_scraper.common.http import HttpClient
from npi_scraper.extract.page import is_not_found_page


def provider_url(npi: str, url_template: str = REGISTRY_URL_TEMPLATE) -> str:
    return url_template.format(npi=npi)


def parse_document(html: str) -> BeautifulSoup:
    # html.parser keeps the whitespace text nodes the address parser indexes.
    return BeautifulSoup(html, "html.parser")


def fetch_provider_page(
    client: HttpClient,
    npi: str,
    url_template: str = REGISTRY_URL_TEMPLATE,
) -> BeautifulSoup:
    document = parse_document(client.get_text(provider_url(npi, url_template)))
    if is_not_found_page(document):
        raise PageNotFoundError()
    return document
