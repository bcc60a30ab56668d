"""
Scraper for Pasadena Humane

Listing cards on the adopt page; when the page has none, the listing is
usually an embedded adoption widget, so the iframe source is scraped instead.
"""
from typing import Callable

from scrapers.generic_shelter import SiteConfig, ShelterSiteAdapter
from scrapers.http_client import PageFetcher


ADOPT_URL = "https://pasadenahumane.org/adopt/"

PASADENA_HUMANE = SiteConfig(
  source_key="pasadena-humane",
  name="Pasadena Humane",
  id_prefix="ph",
  listing_urls=[(ADOPT_URL, None)],
  card_selectors=[
    ".pet-card",
    ".animal-card",
    ".adoptable-pet",
    ".pet-listing",
    ".pet-item",
    "[data-pet-id]",
    ".grid-item",
    "article.pet",
  ],
  iframe_selector="iframe[src*='adopt'], iframe[src*='pet']",
)


def create_adapter(fetcher_factory: Callable[[], PageFetcher] = PageFetcher) -> ShelterSiteAdapter:
  return ShelterSiteAdapter(PASADENA_HUMANE, fetcher_factory)
