"""
Cascade of parse strategies

An adapter tries several fallible strategies in order (JSON API, rendered
HTML, inline scripts...). Each attempt yields a ParseResult; an exception in
one strategy is recorded and the cascade moves on.
"""
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from schema import ScrapedAnimal, ScrapeResult, ShelterMetadata


@dataclass
class ParseResult:
  strategy: str
  animals: List[ScrapedAnimal] = field(default_factory=list)
  error: Optional[str] = None

  @property
  def ok(self) -> bool:
    return self.error is None


def dedupe_by_id(animals: List[ScrapedAnimal]) -> List[ScrapedAnimal]:
  seen = set()
  unique = []
  for animal in animals:
    if animal.external_id in seen:
      continue
    seen.add(animal.external_id)
    unique.append(animal)
  return unique


def merge_new(existing: List[ScrapedAnimal], incoming: List[ScrapedAnimal]) -> int:
  """
  Append incoming animals not already present. Matches on external_id first.
  When either side's ID was synthesized, name is the fallback key: the same
  listing may carry a real ID in one strategy and none in another. Two records
  with distinct source IDs are always both kept. Returns how many were added.
  """
  ids = {a.external_id for a in existing}
  names = {a.name.lower() for a in existing if a.name}
  synthesized_names = {a.name.lower() for a in existing if a.name and a.id_synthesized}
  added = 0
  for animal in incoming:
    name = animal.name.lower()
    if animal.external_id in ids:
      continue
    if name in synthesized_names or (animal.id_synthesized and name in names):
      continue
    existing.append(animal)
    ids.add(animal.external_id)
    names.add(name)
    if animal.id_synthesized:
      synthesized_names.add(name)
    added += 1
  return added


class Cascade:
  """
  Runs strategies in order and accumulates their animals.

  An authoritative strategy that returns records ends the cascade: later
  strategies are skipped. Other strategies merge whatever new records they
  find. The cascade succeeds if at least one strategy ran without error and
  it was not failed outright, e.g. because one of several listing pages
  could not be fetched and its animals would otherwise look retired.
  """

  def __init__(self, name: str):
    self.name = name
    self.animals: List[ScrapedAnimal] = []
    self.attempts: List[ParseResult] = []
    self.done = False
    self.fatal: Optional[str] = None

  def run(self, strategy: str, parse: Callable[[], List[ScrapedAnimal]],
          authoritative: bool = False) -> Optional[ParseResult]:
    if self.done:
      return None

    try:
      result = ParseResult(strategy, dedupe_by_id(parse() or []))
    except Exception as e:
      print(f"  ⚠️ {self.name} [{strategy}] failed: {e}")
      result = ParseResult(strategy, [], str(e) or type(e).__name__)
    self.attempts.append(result)

    if result.ok and result.animals:
      if authoritative and not self.animals:
        self.animals = list(result.animals)
        self.done = True
        added = len(result.animals)
      else:
        added = merge_new(self.animals, result.animals)
      print(f"  ↳ {self.name} [{strategy}]: {len(result.animals)} found, {added} new")
    return result

  def fail(self, reason: str):
    """Mark the whole run failed regardless of which strategies succeeded"""
    self.fatal = reason

  @property
  def success(self) -> bool:
    return self.fatal is None and any(a.ok for a in self.attempts)

  @property
  def error(self) -> Optional[str]:
    if self.success:
      return None
    errors = [f"{a.strategy}: {a.error}" for a in self.attempts if a.error]
    if self.fatal:
      errors.insert(0, self.fatal)
    return "; ".join(errors) or "no strategy ran"


def build_results(source_key: str, shelters: List[ShelterMetadata],
                  grouped: Dict[str, List[ScrapedAnimal]], cascade: Cascade,
                  started: float, location: Optional[str] = None) -> List[ScrapeResult]:
  """One ScrapeResult per shelter location, optionally filtered to one slug"""
  duration_ms = int((time.time() - started) * 1000)
  results = []
  for shelter in shelters:
    if location and shelter.slug != location:
      continue
    success = cascade.success
    results.append(ScrapeResult(
      source_key=source_key,
      shelter_slug=shelter.slug,
      shelter_name=shelter.name,
      animals=grouped.get(shelter.slug, []) if success else [],
      success=success,
      error=cascade.error,
      duration_ms=duration_ms,
    ))
  return results
