"""
Configurable adapter for HTML-first shelter sites
v1.0.0

Most shelter sites are a listing page of cards, sometimes with the same data
embedded as a JSON array in a script tag, and occasionally a JSON endpoint.
ShelterSiteAdapter runs the standard cascade against one SiteConfig:

  1. JSON API candidates in order (first non-empty array wins, cascade ends)
  2. Listing cards on each listing page
  3. JSON arrays / page-state blobs embedded in the same pages
  4. Optional iframe widget, when the page itself had no cards

Source-specific modules (la_city, pasadena_humane, spcala, best_friends)
build their own SiteConfig; the single-location shelters below share the
default one.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from errors import FetchError
from schema import ScrapedAnimal, ScrapeResult, Species
from shelters import get_shelters_by_source_key
from scrapers.cascade import Cascade, build_results
from scrapers.extract import (
  LocationMapper, animals_from_cards, animals_from_json, records_from_scripts,
  unwrap_records, origin_of,
)
from scrapers.http_client import PageFetcher


DEFAULT_CARD_SELECTORS = [
  ".pet-card",
  ".animal-card",
  ".adoptable-pet",
  ".pet-listing",
  ".pet-item",
  "[data-pet-id]",
  "[data-animal-id]",
  "article.pet",
]

IFRAME_CARD_SELECTORS = [".pet", ".animal", "[data-animal]"]


@dataclass
class SiteConfig:
  source_key: str
  name: str
  id_prefix: str
  listing_urls: List[Tuple[str, Optional[Species]]]   # (url, species when the page is species-specific)
  card_selectors: List[str] = field(default_factory=lambda: list(DEFAULT_CARD_SELECTORS))
  api_urls: List[str] = field(default_factory=list)
  location_rules: List[Tuple[str, str]] = field(default_factory=list)
  default_slug: Optional[str] = None                   # defaults to the source's first shelter
  include_state: bool = False
  iframe_selector: Optional[str] = None
  enrich: Optional[Callable[[PageFetcher, ScrapedAnimal], None]] = None


class LazyPage:
  """Fetch a listing page once and share it between strategies"""

  def __init__(self, fetcher: PageFetcher, url: str):
    self.fetcher = fetcher
    self.url = url
    self._soup = None
    self._error = None

  def soup(self) -> BeautifulSoup:
    if self._error is not None:
      raise self._error
    if self._soup is None:
      try:
        self._soup = self.fetcher.fetch_html(self.url)
      except FetchError as e:
        self._error = e
        raise
    return self._soup

  @property
  def failed(self) -> bool:
    return self._error is not None


class ShelterSiteAdapter:
  """Adapter for one source, driven by its SiteConfig"""

  def __init__(self, config: SiteConfig, fetcher_factory: Callable[[], PageFetcher] = PageFetcher):
    self.config = config
    self.source_key = config.source_key
    self.name = config.name
    self.fetcher_factory = fetcher_factory

  def scrape(self, location: Optional[str] = None) -> List[ScrapeResult]:
    config = self.config
    started = time.time()
    shelters = get_shelters_by_source_key(config.source_key)
    if not shelters:
      return []
    mapper = LocationMapper(config.location_rules, config.default_slug or shelters[0].slug)

    print(f"\n🏠 Scraping {config.name}")
    cascade = Cascade(config.source_key)
    with self.fetcher_factory() as fetcher:
      if config.api_urls:
        cascade.run("api", lambda: self._from_api(fetcher), authoritative=True)

      pages = []
      for url, species in config.listing_urls:
        page = LazyPage(fetcher, url)
        pages.append(page)
        html = cascade.run(f"html {url}", lambda: self._from_cards(page, species))
        cascade.run(f"scripts {url}", lambda: self._from_scripts(page, species))
        if config.iframe_selector and html is not None and not html.animals:
          cascade.run(f"iframe {url}", lambda: self._from_iframe(fetcher, page, species))

      # A missing listing page would read as every animal on it leaving
      unreachable = [p.url for p in pages if p.failed]
      if unreachable and not cascade.done:
        cascade.fail(f"listing page unavailable: {', '.join(unreachable)}")

      if config.enrich and cascade.animals and cascade.success:
        self._enrich_all(fetcher, cascade.animals)

    grouped = mapper.group(cascade.animals)
    results = build_results(config.source_key, shelters, grouped, cascade, started, location)
    total = sum(len(r.animals) for r in results)
    if cascade.success:
      print(f"  ✅ Found {total} animals from {config.name}")
    else:
      print(f"  ❌ {config.name} failed: {cascade.error}")
    return results

  def _from_api(self, fetcher: PageFetcher) -> List[ScrapedAnimal]:
    """First candidate endpoint with a non-empty array wins"""
    errors = []
    for url in self.config.api_urls:
      try:
        records = unwrap_records(fetcher.fetch_json(url))
      except FetchError as e:
        errors.append(str(e))
        continue
      animals = animals_from_json(records, self.config.id_prefix, origin_of(url))
      if animals:
        return animals
    if errors and len(errors) == len(self.config.api_urls):
      raise FetchError("api", "; ".join(errors))
    return []

  def _from_cards(self, page: LazyPage, species: Optional[Species]) -> List[ScrapedAnimal]:
    return animals_from_cards(
      page.soup(), self.config.card_selectors, self.config.id_prefix,
      origin_of(page.url), species,
    )

  def _from_scripts(self, page: LazyPage, species: Optional[Species]) -> List[ScrapedAnimal]:
    records = records_from_scripts(page.soup(), include_state=self.config.include_state)
    return animals_from_json(records, self.config.id_prefix, origin_of(page.url), species)

  def _from_iframe(self, fetcher: PageFetcher, page: LazyPage,
                   species: Optional[Species]) -> List[ScrapedAnimal]:
    frame = page.soup().select_one(self.config.iframe_selector)
    if not frame or not frame.get("src"):
      return []
    src = frame["src"]
    if src.startswith("//"):
      src = f"https:{src}"
    elif src.startswith("/"):
      src = origin_of(page.url) + src
    soup = fetcher.fetch_html(src)
    return animals_from_cards(soup, IFRAME_CARD_SELECTORS, self.config.id_prefix, origin_of(src), species)

  def _enrich_all(self, fetcher: PageFetcher, animals: List[ScrapedAnimal]):
    for animal in animals:
      if not animal.adoption_url:
        continue
      try:
        self.config.enrich(fetcher, animal)
      except FetchError as e:
        print(f"    ⚠️ Could not enrich {animal.name}: {e}")


# ========================================
# SINGLE-LOCATION SHELTERS
# ========================================

def _single_site(source_key: str, name: str, id_prefix: str, adoption_url: str,
                 api_urls: Optional[List[str]] = None) -> SiteConfig:
  return SiteConfig(
    source_key=source_key,
    name=name,
    id_prefix=id_prefix,
    listing_urls=[(adoption_url, None)],
    api_urls=api_urls or [],
  )


GENERIC_SITES: Dict[str, SiteConfig] = {
  "long-beach": _single_site(
    "long-beach", "Long Beach Animal Care Services", "lbacs",
    "https://www.longbeach.gov/acs/pet-adoptions/",
  ),
  "burbank": _single_site(
    "burbank", "Burbank Animal Shelter", "burbank",
    "https://www.burbankca.gov/departments/police/animal-shelter/adopt-a-pet",
  ),
  "glendale-humane": _single_site(
    "glendale-humane", "Glendale Humane Society", "ghs",
    "https://www.glendalehumanesociety.org/adopt/",
  ),
  "sgv-humane": _single_site(
    "sgv-humane", "San Gabriel Valley Humane Society", "sgvhs",
    "https://www.sgvhumane.org/adopt",
  ),
  "inland-valley": _single_site(
    "inland-valley", "Inland Valley Humane Society", "ivhs",
    "https://www.ivhsspca.org/adopt/",
  ),
  "santa-monica": _single_site(
    "santa-monica", "Santa Monica Animal Shelter", "smas",
    "https://www.santamonica.gov/animal-shelter",
  ),
  "pets-without-partners": _single_site(
    "pets-without-partners", "Pets Without Partners", "pwp",
    "https://petswithoutpartners.org/adopt/",
  ),
}


def create_generic_adapter(source_key: str, fetcher_factory: Callable[[], PageFetcher] = PageFetcher) -> ShelterSiteAdapter:
  return ShelterSiteAdapter(GENERIC_SITES[source_key], fetcher_factory)
