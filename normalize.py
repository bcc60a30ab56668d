"""
Normalization helpers

Map free-text shelter fields onto the canonical enums. Every function here is
total: any input (empty, None, numbers, junk) yields exactly one value and
nothing raises. The first matching rule wins, so rule order matters
("female" contains "male").
"""
import re
from typing import Any, Optional
from urllib.parse import urljoin

from schema import Species, AgeGroup, Gender, Size


def _lower(value: Any) -> str:
  if value is None:
    return ""
  return str(value).lower().strip()


def clean_text(value: Any) -> str:
  """Collapse whitespace runs and strip"""
  if value is None:
    return ""
  return re.sub(r"\s+", " ", str(value)).strip()


def normalize_age(text: Any) -> AgeGroup:
  """Normalize age text to Baby/Young/Adult/Senior (Adult by default)"""
  lower = _lower(text)

  if any(word in lower for word in ["baby", "kitten", "puppy", "newborn"]):
    return AgeGroup.BABY
  if any(word in lower for word in ["young", "juvenile", "adolescent"]):
    return AgeGroup.YOUNG
  if any(word in lower for word in ["senior", "old", "geriatric"]):
    return AgeGroup.SENIOR
  return AgeGroup.ADULT


def normalize_size(text: Any) -> Size:
  """Normalize size text (Medium by default)"""
  lower = _lower(text)

  if any(word in lower for word in ["extra large", "xl", "giant"]):
    return Size.EXTRA_LARGE
  if any(word in lower for word in ["large", "lg"]):
    return Size.LARGE
  if any(word in lower for word in ["small", "sm", "tiny", "toy"]):
    return Size.SMALL
  return Size.MEDIUM


def normalize_gender(text: Any) -> Gender:
  """Normalize sex text; bare "m"/"f" codes are accepted too"""
  lower = _lower(text)

  if "male" in lower or lower == "m":
    return Gender.FEMALE if "female" in lower else Gender.MALE
  if "female" in lower or lower == "f":
    return Gender.FEMALE
  return Gender.UNKNOWN


def normalize_species(text: Any) -> Species:
  """Normalize species/type text (Other by default)"""
  lower = _lower(text)

  if any(word in lower for word in ["dog", "canine", "puppy"]):
    return Species.DOG
  if any(word in lower for word in ["cat", "feline", "kitten"]):
    return Species.CAT
  if any(word in lower for word in ["rabbit", "bunny"]):
    return Species.RABBIT
  if any(word in lower for word in ["bird", "parrot", "parakeet"]):
    return Species.BIRD
  return Species.OTHER


def _to_number(value: Any) -> Optional[float]:
  if value is None or isinstance(value, bool):
    return None
  try:
    return float(value)
  except (TypeError, ValueError):
    return None


def age_from_years_months(years: Any, months: Any) -> AgeGroup:
  """Bucket a numeric age (years + months) into an age group"""
  y = _to_number(years)
  m = _to_number(months)
  if y is None and m is None:
    return AgeGroup.ADULT

  y = y or 0
  m = m or 0
  if y == 0 and m < 12:
    return AgeGroup.BABY
  elif y < 2:
    return AgeGroup.YOUNG
  elif y < 8:
    return AgeGroup.ADULT
  return AgeGroup.SENIOR


def normalize_flag(value: Any) -> Optional[bool]:
  """Coerce a yes/no style value to True/False, or None when unknown"""
  if value is None:
    return None
  if isinstance(value, bool):
    return value
  if isinstance(value, (int, float)):
    if value == 1:
      return True
    if value == 0:
      return False
    return None

  lower = _lower(value)
  if lower in ["yes", "y", "true", "1"]:
    return True
  if lower in ["no", "n", "false", "0"]:
    return False
  return None


def normalize_photo_url(url: Any, base_origin: str) -> str:
  """
  Make a photo URL absolute.

  "//cdn/x.jpg" -> "https://cdn/x.jpg"
  "/img/x.jpg"  -> base_origin + "/img/x.jpg"
  """
  if not url or not isinstance(url, str):
    return ""
  url = url.strip()
  if not url:
    return ""

  if url.startswith("//"):
    return f"https:{url}"
  if url.startswith(("http://", "https://", "data:")):
    return url
  origin = base_origin.rstrip("/")
  if url.startswith("/"):
    return f"{origin}{url}"
  return urljoin(origin + "/", url)
