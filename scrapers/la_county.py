"""
Scraper for LA County Animal Care Centers (6 locations)
v2.0.0 - Intercepts the search API while a headless browser loads the page

The county search page is rendered client-side from a WordPress JSON endpoint
that refuses most direct requests. The browser loads the page like a visitor
and we keep the JSON it receives. Order of attempts:

  1. Intercepted API responses (paginated while new animals keep arriving)
  2. Listing cards in the rendered DOM of the same page
  3. A direct request to the API endpoint
"""
import time
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup

from config import LA_COUNTY_MAX_PAGES
from errors import FetchError
from normalize import (
  clean_text, normalize_age, normalize_size, normalize_gender, age_from_years_months,
)
from schema import ScrapedAnimal, ScrapeResult, Species
from shelters import get_shelters_by_source_key
from scrapers.browser import BrowserSession
from scrapers.cascade import Cascade, build_results
from scrapers.extract import LocationMapper, first_value, unwrap_records
from scrapers.http_client import PageFetcher


SOURCE_KEY = "la-county"
SEARCH_URL = "https://animalcare.lacounty.gov/dacc-search/"
API_URL = "https://animalcare.lacounty.gov/wp-json/wppro-acc/v1/get/animals"
API_FRAGMENT = "/wp-json/wppro-acc/v1/get/animals"
IMAGE_BASE = "https://daccanimalimagesprod.blob.core.windows.net/images/"

CARD_SELECTOR = ".card.custom-card, .animal-card, [class*='pet-card'], .animal-item"

# Branch names and nearby cities, first match wins
LOCATION_RULES = [
  ("agoura", "la-county-agoura"),
  ("baldwin park", "la-county-baldwin-park"),
  ("baldwin", "la-county-baldwin-park"),
  ("carson", "la-county-carson"),
  ("gardena", "la-county-carson"),
  ("castaic", "la-county-castaic"),
  ("downey", "la-county-downey"),
  ("lancaster", "la-county-lancaster"),
  ("palmdale", "la-county-lancaster"),
]

DEFAULT_SLUG = "la-county-downey"


def search_page_url(page_number: int) -> str:
  return f"{SEARCH_URL}?PageNumber={page_number}&SortType=0&PageSize=100"


def animal_from_record(record: Dict) -> Optional[ScrapedAnimal]:
  """Convert one county API record"""
  animal_id = first_value(record, ["animalId", "AnimalId", "id"])
  if animal_id is None:
    return None
  animal_id = str(animal_id)

  name = clean_text(first_value(record, ["animalName", "Name", "name"])) or f"Pet {animal_id}"
  animal_type = str(first_value(record, ["animalType", "Type", "type"]) or "DOG").upper()

  if "yearsOld" in record or "monthsOld" in record:
    age = age_from_years_months(record.get("yearsOld"), record.get("monthsOld"))
  else:
    age = normalize_age(first_value(record, ["age", "Age"]))

  photos = []
  image_count = record.get("imageCount") or 0
  if (isinstance(image_count, (int, float)) and image_count > 0) or record.get("image"):
    photos.append(f"{IMAGE_BASE}{animal_id}.jpg")

  color = clean_text(record.get("primaryColor"))
  return ScrapedAnimal(
    external_id=animal_id,
    name=name,
    species=Species.CAT if "CAT" in animal_type else Species.DOG,
    breed=clean_text(first_value(record, ["breed", "Breed"])) or "Mixed Breed",
    age=age,
    gender=normalize_gender(first_value(record, ["sex", "Sex"])),
    size=normalize_size(first_value(record, ["animalSize", "Size"])),
    color=color or None,
    description=f"Color: {color}" if color else None,
    photos=photos,
    adoption_url=f"{SEARCH_URL}?AnimalID={animal_id}",
    location=clean_text(first_value(record, ["location", "Location"])) or None,
  )


def animals_from_records(records: List[Any]) -> List[ScrapedAnimal]:
  animals = []
  for record in records:
    if not isinstance(record, dict):
      continue
    animal = animal_from_record(record)
    if animal:
      animals.append(animal)
  return animals


def records_from_dom(html: str) -> List[Dict]:
  """Cards carry the animal on a favourite button: data-id / data-name / data-image"""
  soup = BeautifulSoup(html, "html.parser")
  records = []
  for card in soup.select(CARD_SELECTOR):
    button = card.select_one("[data-id]")
    if not button or not button.get("data-id"):
      continue
    img = card.find("img")
    records.append({
      "animalId": button["data-id"],
      "animalName": button.get("data-name", ""),
      "image": button.get("data-image") or (img.get("src", "") if img else ""),
      "animalType": "DOG",
      "breed": "Mixed Breed",
      "sex": "Unknown",
      "location": "",
    })
  return records


class LACountyAdapter:
  """Adapter for animalcare.lacounty.gov"""

  source_key = SOURCE_KEY
  name = "LA County Animal Care"

  def __init__(self, fetcher_factory: Callable[[], PageFetcher] = PageFetcher,
               browser_factory: Callable[[], BrowserSession] = BrowserSession,
               max_pages: int = LA_COUNTY_MAX_PAGES):
    self.fetcher_factory = fetcher_factory
    self.browser_factory = browser_factory
    self.max_pages = max_pages
    self.mapper = LocationMapper(LOCATION_RULES, DEFAULT_SLUG)

  def scrape(self, location: Optional[str] = None) -> List[ScrapeResult]:
    started = time.time()
    shelters = get_shelters_by_source_key(SOURCE_KEY)
    print(f"\n🏠 Scraping {self.name}")

    cascade = Cascade(SOURCE_KEY)
    rendered = {"html": ""}
    cascade.run("intercept", lambda: self._intercept(rendered), authoritative=True)
    cascade.run("dom", lambda: self._from_dom(rendered["html"]), authoritative=True)
    cascade.run("api-probe", self._probe_api, authoritative=True)

    grouped = self.mapper.group(cascade.animals)
    for slug, animals in grouped.items():
      print(f"  📊 {slug}: {len(animals)} pets")
    return build_results(SOURCE_KEY, shelters, grouped, cascade, started, location)

  def _intercept(self, rendered: Dict[str, str]) -> List[ScrapedAnimal]:
    animals: List[ScrapedAnimal] = []
    seen = set()

    def collect(payloads: List[Any]) -> int:
      new = 0
      for payload in payloads:
        for animal in animals_from_records(unwrap_records(payload)):
          if animal.external_id not in seen:
            seen.add(animal.external_id)
            animals.append(animal)
            new += 1
      return new

    with self.browser_factory() as browser:
      payloads, rendered["html"] = browser.load_and_intercept(search_page_url(1), API_FRAGMENT)
      collect(payloads)
      print(f"  ↳ After first page: {len(animals)} animals intercepted")

      page_number = 2
      while animals and page_number <= self.max_pages:
        payloads, _ = browser.load_and_intercept(search_page_url(page_number), API_FRAGMENT)
        if collect(payloads) == 0:
          break
        page_number += 1

    return animals

  def _from_dom(self, html: str) -> List[ScrapedAnimal]:
    if not html:
      raise FetchError(SEARCH_URL, "page was not rendered")
    return animals_from_records(records_from_dom(html))

  def _probe_api(self) -> List[ScrapedAnimal]:
    print("  ⚠️ Trying direct API call as last resort...")
    with self.fetcher_factory() as fetcher:
      return animals_from_records(unwrap_records(fetcher.fetch_json(API_URL)))


def create_adapter(fetcher_factory: Callable[[], PageFetcher] = PageFetcher,
                   browser_factory: Callable[[], BrowserSession] = BrowserSession) -> LACountyAdapter:
  return LACountyAdapter(fetcher_factory, browser_factory)
