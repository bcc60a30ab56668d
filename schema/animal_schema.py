"""
Canonical Animal Schema
v1.0.0

Every adapter produces ScrapedAnimal records in this shape, whatever markup or
JSON the shelter site serves. StoredAnimal is the reconciled, persistent view.

Design Principles:
- Enumerated fields always hold exactly one canonical value
- Attribute flags are tri-state: True, False or None (source did not say)
- Photos are ordered; index 0 is the primary photo
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class Species(str, Enum):
  DOG = "Dog"
  CAT = "Cat"
  RABBIT = "Rabbit"
  BIRD = "Bird"
  OTHER = "Other"


class AgeGroup(str, Enum):
  BABY = "Baby"
  YOUNG = "Young"
  ADULT = "Adult"
  SENIOR = "Senior"


class Gender(str, Enum):
  MALE = "Male"
  FEMALE = "Female"
  UNKNOWN = "Unknown"


class Size(str, Enum):
  SMALL = "Small"
  MEDIUM = "Medium"
  LARGE = "Large"
  EXTRA_LARGE = "Extra Large"


# Tri-state attribute flags, in storage column order
ATTRIBUTE_FLAGS = [
  "spayed_neutered",
  "house_trained",
  "special_needs",
  "shots_current",
  "good_with_children",
  "good_with_dogs",
  "good_with_cats",
]

# Fields overwritten on every sighting
MUTABLE_FIELDS = [
  "name",
  "species",
  "breed",
  "breed_secondary",
  "age",
  "gender",
  "size",
  "description",
  "color",
  "adoption_url",
  "intake_date",
  "location",
] + ATTRIBUTE_FLAGS


@dataclass
class ScrapedAnimal:
  """One animal as seen by one scrape run"""
  external_id: str               # Stable within a source (synthesized if the site has none)
  name: str
  species: Species = Species.OTHER
  breed: str = ""
  age: AgeGroup = AgeGroup.ADULT
  gender: Gender = Gender.UNKNOWN
  size: Size = Size.MEDIUM
  breed_secondary: Optional[str] = None
  description: Optional[str] = None
  color: Optional[str] = None
  photos: List[str] = field(default_factory=list)
  adoption_url: Optional[str] = None
  intake_date: Optional[str] = None
  location: Optional[str] = None  # Raw location text reported by the source

  spayed_neutered: Optional[bool] = None
  house_trained: Optional[bool] = None
  special_needs: Optional[bool] = None
  shots_current: Optional[bool] = None
  good_with_children: Optional[bool] = None
  good_with_dogs: Optional[bool] = None
  good_with_cats: Optional[bool] = None

  id_synthesized: bool = False   # external_id was hashed from name/breed/location

  def to_dict(self) -> Dict[str, Any]:
    result = asdict(self)
    for key in ("species", "age", "gender", "size"):
      result[key] = getattr(self, key).value
    return result

  def field_values(self) -> Dict[str, Any]:
    """Mutable field values ready for storage"""
    values = {}
    for name in MUTABLE_FIELDS:
      value = getattr(self, name)
      if isinstance(value, Enum):
        value = value.value
      values[name] = value
    return values


@dataclass
class AnimalPhoto:
  url: str
  is_primary: bool = False
  sort_order: int = 0

  def to_dict(self) -> Dict:
    return asdict(self)


@dataclass
class StoredAnimal:
  """
  Reconciled animal record.

  Created on first sighting, overwritten on every later sighting, and
  retired (is_available=False) when a sighting round misses it. Never
  physically deleted.
  """
  id: int
  source_key: str
  shelter_slug: str
  external_id: str
  name: str
  species: str = Species.OTHER.value
  breed: str = ""
  age: str = AgeGroup.ADULT.value
  gender: str = Gender.UNKNOWN.value
  size: str = Size.MEDIUM.value
  breed_secondary: Optional[str] = None
  description: Optional[str] = None
  color: Optional[str] = None
  adoption_url: Optional[str] = None
  intake_date: Optional[str] = None
  location: Optional[str] = None

  spayed_neutered: Optional[bool] = None
  house_trained: Optional[bool] = None
  special_needs: Optional[bool] = None
  shots_current: Optional[bool] = None
  good_with_children: Optional[bool] = None
  good_with_dogs: Optional[bool] = None
  good_with_cats: Optional[bool] = None

  first_seen_at: Optional[str] = None
  last_seen_at: Optional[str] = None
  is_available: bool = True
  photos: List[AnimalPhoto] = field(default_factory=list)

  @property
  def primary_photo(self) -> Optional[str]:
    for photo in self.photos:
      if photo.is_primary:
        return photo.url
    return self.photos[0].url if self.photos else None

  @classmethod
  def from_row(cls, row: Dict, photos: Optional[List[AnimalPhoto]] = None) -> "StoredAnimal":
    """Create from a database row (sqlite stores booleans as 0/1/NULL)"""
    data = {k: v for k, v in row.items() if k in cls.__dataclass_fields__}
    for flag in ATTRIBUTE_FLAGS:
      if data.get(flag) is not None:
        data[flag] = bool(data[flag])
    data["is_available"] = bool(data.get("is_available", 1))
    data["photos"] = photos or []
    return cls(**data)

  def to_dict(self) -> Dict:
    result = asdict(self)
    result["primary_photo"] = self.primary_photo
    return result


def get_current_timestamp() -> str:
  """Returns current timestamp in ISO format"""
  return datetime.now().isoformat()
