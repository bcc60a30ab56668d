"""
Shared extraction helpers for the source adapters

Shelter sites expose animals three ways: listing cards in HTML, JSON arrays
embedded in inline scripts, and JSON APIs. The helpers here turn any of those
into ScrapedAnimal records, defaulting every missing field through the
normalizers instead of failing.
"""
import hashlib
import json
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from config import EMBEDDED_ARRAY_KEYS
from normalize import (
  clean_text, normalize_age, normalize_size, normalize_gender,
  normalize_species, normalize_flag, normalize_photo_url, age_from_years_months,
)
from schema import ScrapedAnimal, Species


# Child selectors tried on a listing card, most specific first
NAME_SELECTOR = ".pet-name, .name, h2, h3, h4"
SPECIES_SELECTOR = ".species, .pet-type, .animal-type"
BREED_SELECTOR = ".breed, .pet-breed"
AGE_SELECTOR = ".age, .pet-age"
GENDER_SELECTOR = ".gender, .pet-gender, .sex"
SIZE_SELECTOR = ".size, .pet-size"
COLOR_SELECTOR = ".color, .pet-color"
LOCATION_SELECTOR = ".location, .shelter-location, .shelter-name, .shelter"
DESCRIPTION_SELECTOR = ".description, .bio, .pet-bio, .pet-description"

# JSON key variants seen across sources, in priority order
ID_KEYS = ["id", "animal_id", "animalId", "AnimalId", "externalId", "ID"]
NAME_KEYS = ["name", "animalName", "Name"]
SPECIES_KEYS = ["species", "type", "animalType", "Type"]
BREED_KEYS = ["breed", "primary_breed", "primaryBreed", "Breed"]
AGE_KEYS = ["age", "Age", "ageGroup"]
GENDER_KEYS = ["gender", "sex", "Sex", "Gender"]
SIZE_KEYS = ["size", "animalSize", "Size"]
COLOR_KEYS = ["color", "primaryColor", "Color"]
LOCATION_KEYS = ["location", "Location", "shelter", "shelterName"]
DESCRIPTION_KEYS = ["description", "bio", "Description"]
LINK_KEYS = ["url", "link", "adoptionUrl", "adoption_url"]
INTAKE_KEYS = ["intake_date", "intakeDate", "IntakeDate"]

FLAG_KEYS = {
  "spayed_neutered": ["spayed_neutered", "altered", "fixed", "spayedNeutered"],
  "house_trained": ["house_trained", "houseTrained"],
  "special_needs": ["special_needs", "specialNeeds"],
  "shots_current": ["shots_current", "vaccinated", "shotsCurrent"],
  "good_with_children": ["good_with_children", "good_with_kids", "kids", "goodWithChildren"],
  "good_with_dogs": ["good_with_dogs", "dogs", "goodWithDogs"],
  "good_with_cats": ["good_with_cats", "cats", "goodWithCats"],
}

STATE_BLOB_PATTERN = re.compile(r"window\.__(?:NUXT__|NEXT_DATA__|INITIAL_STATE__)\s*=\s*")


def origin_of(url: str) -> str:
  parsed = urlparse(url)
  return f"{parsed.scheme}://{parsed.netloc}"


def synthesize_id(prefix: str, *parts: Any) -> str:
  """
  Deterministic ID for a listing without one. The same name/breed/location
  always hashes to the same ID, so the animal is tracked across runs.
  """
  key = "|".join(clean_text(p).lower() for p in parts)
  digest = hashlib.md5(key.encode("utf-8")).hexdigest()[:12]
  return f"{prefix}-{digest}"


def first_value(record: Dict, keys: Iterable[str]) -> Any:
  for key in keys:
    value = record.get(key)
    if value not in (None, ""):
      return value
  return None


# ========================================
# HTML
# ========================================

def text_of(element: Tag, selector: str) -> str:
  """Text of the first match for selector under element, "" when absent"""
  found = element.select_one(selector)
  return clean_text(found.get_text(" ", strip=True)) if found else ""


def image_src(element: Tag) -> str:
  img = element if element.name == "img" else element.find("img")
  if not img:
    return ""
  return img.get("src") or img.get("data-src") or img.get("data-lazy-src") or ""


def first_link(element: Tag) -> str:
  if element.name == "a" and element.get("href"):
    return element["href"]
  link = element.find("a", href=True)
  return link["href"] if link else ""


def id_from_link(link: str) -> Optional[str]:
  """
  Numeric ID from a detail link like /pet/12345/, ?pet_id=12345 or ?id=12345.
  Only the final path segment counts, so /pets/2024/bella has no ID.
  """
  if not link:
    return None
  for pattern in [r"pet[_-]?id[=/](\d+)", r"[?&]id=(\d+)", r"/(\d+)/?(?:[?#].*)?$"]:
    match = re.search(pattern, link, re.I)
    if match:
      return match.group(1)
  return None


def animal_from_card(card: Tag, id_prefix: str, base_origin: str,
                     default_species: Optional[Species] = None) -> Optional[ScrapedAnimal]:
  """Build an animal from one listing element. Cards without a name are skipped."""
  name = text_of(card, NAME_SELECTOR)
  if not name:
    return None

  breed = text_of(card, BREED_SELECTOR)
  location = text_of(card, LOCATION_SELECTOR)
  link = first_link(card)
  external_id = (
    card.get("data-pet-id") or card.get("data-animal-id") or card.get("data-id")
    or id_from_link(link)
  )
  synthesized = not external_id
  if synthesized:
    external_id = synthesize_id(id_prefix, name, breed, location)

  species_text = text_of(card, SPECIES_SELECTOR)
  species = normalize_species(species_text or name)
  if species == Species.OTHER and default_species:
    species = default_species

  photo = normalize_photo_url(image_src(card), base_origin)

  return ScrapedAnimal(
    external_id=str(external_id),
    name=name,
    species=species,
    breed=breed,
    age=normalize_age(text_of(card, AGE_SELECTOR)),
    gender=normalize_gender(text_of(card, GENDER_SELECTOR)),
    size=normalize_size(text_of(card, SIZE_SELECTOR)),
    color=text_of(card, COLOR_SELECTOR) or None,
    description=text_of(card, DESCRIPTION_SELECTOR) or None,
    photos=[photo] if photo else [],
    adoption_url=normalize_photo_url(link, base_origin) or None,
    location=location or None,
    id_synthesized=synthesized,
  )


def animals_from_cards(soup: BeautifulSoup, selectors: List[str], id_prefix: str,
                       base_origin: str, default_species: Optional[Species] = None) -> List[ScrapedAnimal]:
  animals = []
  for card in soup.select(", ".join(selectors)):
    animal = animal_from_card(card, id_prefix, base_origin, default_species)
    if animal:
      animals.append(animal)
  return animals


# ========================================
# JSON
# ========================================

def photos_from_json(record: Dict, base_origin: str) -> List[str]:
  photos = []
  single = [record.get("photo"), record.get("image")]
  for url in single:
    if isinstance(url, str):
      photos.append(url)

  for key in ["photos", "images"]:
    items = record.get(key)
    if not isinstance(items, list):
      continue
    for item in items:
      if isinstance(item, str):
        photos.append(item)
      elif isinstance(item, dict):
        url = item.get("url") or item.get("large") or item.get("medium") or item.get("small")
        if isinstance(url, str):
          photos.append(url)

  normalized = []
  for url in photos:
    url = normalize_photo_url(url, base_origin)
    if url and url not in normalized:
      normalized.append(url)
  return normalized


def animal_from_json(record: Any, id_prefix: str, base_origin: str,
                     default_species: Optional[Species] = None) -> Optional[ScrapedAnimal]:
  """Build an animal from one JSON object. Records without a name are skipped."""
  if not isinstance(record, dict):
    return None
  name = clean_text(first_value(record, NAME_KEYS))
  if not name:
    return None

  breed = clean_text(first_value(record, BREED_KEYS))
  location = clean_text(first_value(record, LOCATION_KEYS))
  raw_id = first_value(record, ID_KEYS)
  synthesized = raw_id is None
  external_id = synthesize_id(id_prefix, name, breed, location) if synthesized else str(raw_id)

  species = normalize_species(first_value(record, SPECIES_KEYS))
  if species == Species.OTHER and default_species:
    species = default_species

  if "yearsOld" in record or "monthsOld" in record:
    age = age_from_years_months(record.get("yearsOld"), record.get("monthsOld"))
  else:
    age = normalize_age(first_value(record, AGE_KEYS))

  color = clean_text(first_value(record, COLOR_KEYS))
  description = clean_text(first_value(record, DESCRIPTION_KEYS))
  link = first_value(record, LINK_KEYS)
  intake = first_value(record, INTAKE_KEYS)

  animal = ScrapedAnimal(
    external_id=external_id,
    name=name,
    species=species,
    breed=breed,
    breed_secondary=clean_text(record.get("secondary_breed")) or None,
    age=age,
    gender=normalize_gender(first_value(record, GENDER_KEYS)),
    size=normalize_size(first_value(record, SIZE_KEYS)),
    color=color or None,
    description=description or None,
    photos=photos_from_json(record, base_origin),
    adoption_url=normalize_photo_url(link, base_origin) or None,
    intake_date=str(intake) if intake else None,
    location=location or None,
    id_synthesized=synthesized,
  )
  for flag, keys in FLAG_KEYS.items():
    setattr(animal, flag, normalize_flag(first_value(record, keys)))
  return animal


def animals_from_json(records: Iterable[Any], id_prefix: str, base_origin: str,
                      default_species: Optional[Species] = None) -> List[ScrapedAnimal]:
  animals = []
  for record in records:
    animal = animal_from_json(record, id_prefix, base_origin, default_species)
    if animal:
      animals.append(animal)
  return animals


def unwrap_records(payload: Any) -> List[Any]:
  """API bodies are either a bare array or an object wrapping one"""
  if isinstance(payload, list):
    return payload
  if isinstance(payload, dict):
    for key in EMBEDDED_ARRAY_KEYS + ["data"]:
      value = payload.get(key)
      if isinstance(value, list):
        return value
  return []


def _looks_like_animal(item: Any) -> bool:
  return (
    isinstance(item, dict)
    and bool(first_value(item, NAME_KEYS))
    and first_value(item, SPECIES_KEYS + BREED_KEYS) is not None
  )


def find_animals_in_data(data: Any, depth: int = 0) -> List[Dict]:
  """Walk a page-state blob and collect the objects that look like animals"""
  if depth > 12 or not isinstance(data, (dict, list)):
    return []
  if _looks_like_animal(data):
    return [data]

  found = []
  children = data.values() if isinstance(data, dict) else data
  for child in children:
    found.extend(find_animals_in_data(child, depth + 1))
  return found


# ========================================
# Inline scripts
# ========================================

def _decode_at(content: str, start: int) -> Any:
  value, _ = json.JSONDecoder().raw_decode(content, start)
  return value


def embedded_arrays(content: str, keys: Optional[List[str]] = None) -> List[List[Any]]:
  """
  JSON arrays assigned to one of keys inside a script body, e.g.
  `var pets = [...]` or `"animals": [...]`. Arrays that are not valid JSON
  are ignored.
  """
  keys = keys or EMBEDDED_ARRAY_KEYS
  pattern = re.compile(r"[\"']?\b(?:%s)\b[\"']?\s*[:=]\s*\[" % "|".join(map(re.escape, keys)))
  arrays = []
  for match in pattern.finditer(content):
    try:
      value = _decode_at(content, match.end() - 1)
    except ValueError:
      continue
    if isinstance(value, list):
      arrays.append(value)
  return arrays


def state_blobs(soup: BeautifulSoup) -> List[Any]:
  """Framework page-state objects (__NEXT_DATA__, __INITIAL_STATE__, __NUXT__)"""
  blobs = []
  next_data = soup.find("script", id="__NEXT_DATA__")
  if next_data and next_data.string:
    try:
      blobs.append(json.loads(next_data.string))
    except ValueError:
      pass

  for script in soup.find_all("script"):
    content = script.string or ""
    for match in STATE_BLOB_PATTERN.finditer(content):
      start = content.find("{", match.end())
      if start != match.end():
        continue
      try:
        blobs.append(_decode_at(content, start))
      except ValueError:
        continue
  return blobs


def records_from_scripts(soup: BeautifulSoup, include_state: bool = False) -> List[Any]:
  records = []
  for script in soup.find_all("script"):
    content = script.string or ""
    if not content:
      continue
    for array in embedded_arrays(content):
      records.extend(array)
  if include_state:
    for blob in state_blobs(soup):
      records.extend(find_animals_in_data(blob))
  return records


# ========================================
# Locations
# ========================================

class LocationMapper:
  """
  Attributes raw location text to a shelter slug by substring match. Rules
  are checked in order; unmatched text falls back to the default slug so no
  record is dropped.
  """

  def __init__(self, rules: List[Tuple[str, str]], default_slug: str):
    self.rules = [(needle.lower(), slug) for needle, slug in rules]
    self.default_slug = default_slug

  def slug_for(self, text: Optional[str]) -> str:
    lower = (text or "").lower().strip()
    if lower:
      for needle, slug in self.rules:
        if needle in lower:
          return slug
    return self.default_slug

  def group(self, animals: List[ScrapedAnimal]) -> Dict[str, List[ScrapedAnimal]]:
    grouped: Dict[str, List[ScrapedAnimal]] = {}
    for animal in animals:
      grouped.setdefault(self.slug_for(animal.location), []).append(animal)
    return grouped
