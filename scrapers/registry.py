"""
Adapter registry

Static table of source key -> adapter factory. A fresh adapter is built for
every run so no state is carried between runs or shared between threads.
"""
from typing import Callable, Dict, List, Optional, Protocol

from errors import UnknownSourceError
from schema import ScrapeResult, ShelterMetadata
from shelters import SHELTERS
from scrapers import best_friends, la_city, la_county, pasadena_humane, spcala
from scrapers.generic_shelter import GENERIC_SITES, create_generic_adapter


class Adapter(Protocol):
  source_key: str
  name: str

  def scrape(self, location: Optional[str] = None) -> List[ScrapeResult]:
    ...


AdapterFactory = Callable[[], Adapter]


def _generic_factory(source_key: str) -> AdapterFactory:
  return lambda: create_generic_adapter(source_key)


DEFAULT_FACTORIES: Dict[str, AdapterFactory] = {
  "la-county": la_county.create_adapter,
  "la-city": la_city.create_adapter,
  "pasadena-humane": pasadena_humane.create_adapter,
  "spcala": spcala.create_adapter,
  "best-friends": best_friends.create_adapter,
}
for _key in GENERIC_SITES:
  DEFAULT_FACTORIES[_key] = _generic_factory(_key)


class AdapterRegistry:
  """Maps source keys to adapters and to their shelter metadata"""

  def __init__(self, factories: Optional[Dict[str, AdapterFactory]] = None,
               shelters: Optional[List[ShelterMetadata]] = None):
    self.factories = dict(DEFAULT_FACTORIES if factories is None else factories)
    self.shelters = list(SHELTERS if shelters is None else shelters)

  def source_keys(self) -> List[str]:
    return list(self.factories.keys())

  def has_source(self, source_key: str) -> bool:
    return source_key in self.factories

  def get_adapter(self, source_key: str) -> Adapter:
    factory = self.factories.get(source_key)
    if factory is None:
      raise UnknownSourceError(source_key)
    return factory()

  def list_shelter_metadata_by_source_key(self, source_key: str) -> List[ShelterMetadata]:
    return [s for s in self.shelters if s.source_key == source_key]

  def initialize_shelters(self, store) -> int:
    """
    Upsert every configured shelter by slug. Safe to call before every run.
    Returns the number of shelters written.
    """
    count = 0
    for shelter in self.shelters:
      store.upsert_shelter(shelter)
      count += 1
    print(f"  ✅ Initialized {count} shelters")
    return count
