"""
Shelter metadata - static configuration, one row per physical location
"""
from dataclasses import dataclass, asdict
from typing import Optional, Dict


@dataclass
class ShelterMetadata:
  """
  A physical shelter location.

  Several locations may share one source_key when a single adapter serves
  them all (e.g. the six LA County centers behind one search portal).
  """
  name: str
  slug: str
  website: str
  adoption_url: str
  city: str
  platform: str
  source_key: str
  email: Optional[str] = None
  phone: Optional[str] = None
  street: Optional[str] = None
  postcode: Optional[str] = None
  latitude: Optional[float] = None
  longitude: Optional[float] = None

  def to_dict(self) -> Dict:
    return asdict(self)

  @classmethod
  def from_dict(cls, data: Dict) -> "ShelterMetadata":
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
