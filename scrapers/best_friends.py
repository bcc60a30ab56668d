"""
Scraper for Best Friends Animal Society - Los Angeles

Best Friends is a national database filtered to the LA lifesaving center.
Its search API is undocumented, so a few candidate endpoints are tried
before falling back to the rendered page and its framework state blob.
"""
from typing import Callable

from scrapers.generic_shelter import SiteConfig, ShelterSiteAdapter
from scrapers.http_client import PageFetcher


SEARCH_URL = "https://bestfriends.org/adopt-pet?location=los-angeles"

API_CANDIDATES = [
  "https://bestfriends.org/api/v1/animals?location=los-angeles",
  "https://bestfriends.org/api/animals?center=los-angeles",
  "https://bestfriends.org/adopt/api/search?location=los-angeles",
]

BEST_FRIENDS = SiteConfig(
  source_key="best-friends",
  name="Best Friends Animal Society - LA",
  id_prefix="bf",
  listing_urls=[(SEARCH_URL, None)],
  card_selectors=[".pet-card", ".animal-card", ".adoptable-animal", "[data-animal-id]"],
  api_urls=API_CANDIDATES,
  include_state=True,
)


def create_adapter(fetcher_factory: Callable[[], PageFetcher] = PageFetcher) -> ShelterSiteAdapter:
  return ShelterSiteAdapter(BEST_FRIENDS, fetcher_factory)
