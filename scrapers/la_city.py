"""
Scraper for LA City Animal Services (6 shelters)

One adoption page lists animals from every city shelter; each card or
embedded record carries the shelter name, which picks the location.
"""
from typing import Callable

from scrapers.generic_shelter import SiteConfig, ShelterSiteAdapter
from scrapers.http_client import PageFetcher


ADOPT_URL = "https://www.laanimalservices.com/adopt/"

# Checked in order, first match wins
LOCATION_RULES = [
  ("east valley", "la-city-east-valley"),
  ("west valley", "la-city-west-valley"),
  ("west la", "la-city-west-la"),
  ("west los angeles", "la-city-west-la"),
  ("north central", "la-city-north-central"),
  ("south la", "la-city-south-la"),
  ("south los angeles", "la-city-south-la"),
  ("harbor", "la-city-harbor"),
  ("san pedro", "la-city-harbor"),
]

DEFAULT_SLUG = "la-city-north-central"

LA_CITY = SiteConfig(
  source_key="la-city",
  name="LA City Animal Services",
  id_prefix="laas",
  listing_urls=[(ADOPT_URL, None)],
  card_selectors=[".pet-listing", ".animal-card", ".adoptable-pet", "[data-pet-id]"],
  location_rules=LOCATION_RULES,
  default_slug=DEFAULT_SLUG,
)


def create_adapter(fetcher_factory: Callable[[], PageFetcher] = PageFetcher) -> ShelterSiteAdapter:
  return ShelterSiteAdapter(LA_CITY, fetcher_factory)
