"""
Scraper for spcaLA (South Bay and Long Beach adoption centers)
v1.1.0 - Optional detail-page enrichment

Dogs and cats are listed on separate pages, so species comes from the page.
With SPCALA_FETCH_DETAILS enabled each animal's detail page is fetched for
the full gallery, the long description and the attribute list.
"""
from typing import Callable, Optional

from config import SPCALA_FETCH_DETAILS
from normalize import clean_text, normalize_photo_url
from schema import ScrapedAnimal, Species
from scrapers.extract import image_src, origin_of
from scrapers.generic_shelter import SiteConfig, ShelterSiteAdapter
from scrapers.http_client import PageFetcher


DOGS_URL = "https://spcala.com/adoptable/dogs/"
CATS_URL = "https://spcala.com/adoptable/cats/"

LOCATION_RULES = [
  ("south bay", "spcala-south-bay"),
  ("hawthorne", "spcala-south-bay"),
  ("long beach", "spcala-long-beach"),
  ("pitchford", "spcala-long-beach"),
]


def _mentions(text: str, positive: list, negative: Optional[list] = None) -> Optional[bool]:
  """True/False when the text says so, None when it says nothing"""
  if negative and any(term in text for term in negative):
    return False
  if any(term in text for term in positive):
    return True
  return None


def enrich_from_detail_page(fetcher: PageFetcher, animal: ScrapedAnimal):
  """Fill gallery photos, description and attribute flags from the detail page"""
  soup = fetcher.fetch_html(animal.adoption_url)
  origin = origin_of(animal.adoption_url)

  photos = []
  for img in soup.select(".pet-gallery img, .gallery img, .pet-photos img"):
    src = normalize_photo_url(image_src(img), origin)
    if src and src not in photos:
      photos.append(src)
  if photos:
    animal.photos = photos

  description = soup.select_one(".pet-description, .pet-bio, .description, .about")
  if description:
    text = clean_text(description.get_text(" ", strip=True))
    if text:
      animal.description = text

  attributes = soup.select_one(".pet-attributes, .attributes, .details")
  if not attributes:
    return
  text = attributes.get_text(" ", strip=True).lower()

  animal.spayed_neutered = _mentions(text, ["spayed", "neutered"]) or animal.spayed_neutered
  animal.house_trained = _mentions(text, ["house trained", "housebroken"]) or animal.house_trained
  animal.shots_current = _mentions(text, ["vaccinated", "shots"]) or animal.shots_current
  animal.special_needs = _mentions(text, ["special needs", "medical needs"]) or animal.special_needs

  kids = _mentions(text, ["good with kids", "good with children"], ["no kids", "no children"])
  dogs = _mentions(text, ["good with dogs"], ["no dogs"])
  cats = _mentions(text, ["good with cats"], ["no cats"])
  if kids is not None:
    animal.good_with_children = kids
  if dogs is not None:
    animal.good_with_dogs = dogs
  if cats is not None:
    animal.good_with_cats = cats


def build_config(fetch_details: bool = SPCALA_FETCH_DETAILS) -> SiteConfig:
  return SiteConfig(
    source_key="spcala",
    name="spcaLA",
    id_prefix="spcala",
    listing_urls=[(DOGS_URL, Species.DOG), (CATS_URL, Species.CAT)],
    card_selectors=[".pet-card", ".adoptable-pet", ".animal-listing", "article.pet", ".pet-item"],
    location_rules=LOCATION_RULES,
    default_slug="spcala-south-bay",
    enrich=enrich_from_detail_page if fetch_details else None,
  )


def create_adapter(fetcher_factory: Callable[[], PageFetcher] = PageFetcher,
                   fetch_details: bool = SPCALA_FETCH_DETAILS) -> ShelterSiteAdapter:
  return ShelterSiteAdapter(build_config(fetch_details), fetcher_factory)
