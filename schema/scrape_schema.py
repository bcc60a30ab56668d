"""
Scrape run records

ScrapeResult is what an adapter hands back for one shelter location.
ScrapeRunLog is the append-only audit row written for every reconciliation.
RunSummary aggregates one orchestrator call.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict

from .animal_schema import ScrapedAnimal


@dataclass
class ScrapeResult:
  source_key: str
  shelter_slug: str
  shelter_name: str
  animals: List[ScrapedAnimal] = field(default_factory=list)
  success: bool = True
  error: Optional[str] = None
  duration_ms: int = 0


@dataclass
class ReconcileStats:
  added: int = 0
  updated: int = 0
  retired: int = 0
  failed: int = 0
  duration_ms: int = 0


@dataclass
class ScrapeRunLog:
  """Audit row. Never updated after insert."""
  source_key: str
  shelter_slug: str
  shelter_name: str
  status: str                    # "success" or "error"
  pets_found: int = 0
  pets_added: int = 0
  pets_updated: int = 0
  pets_removed: int = 0
  pets_failed: int = 0
  error_message: Optional[str] = None
  duration_ms: int = 0
  created_at: Optional[str] = None
  id: Optional[int] = None

  def to_dict(self) -> Dict:
    return asdict(self)

  @classmethod
  def from_dict(cls, data: Dict) -> "ScrapeRunLog":
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class SourceRunResult:
  """One shelter location's outcome within a run"""
  source_key: str
  shelter_slug: str
  shelter_name: str
  success: bool
  animals_found: int = 0
  added: int = 0
  updated: int = 0
  retired: int = 0
  failed: int = 0
  duration_ms: int = 0
  error: Optional[str] = None

  def to_dict(self) -> Dict:
    return asdict(self)


@dataclass
class RunSummary:
  results: List[SourceRunResult] = field(default_factory=list)
  total_duration_ms: int = 0

  @property
  def total_sources(self) -> int:
    return len(self.results)

  @property
  def successful_sources(self) -> int:
    return sum(1 for r in self.results if r.success)

  @property
  def total_animals_found(self) -> int:
    return sum(r.animals_found for r in self.results)

  def to_dict(self) -> Dict:
    return {
      "summary": {
        "total_sources": self.total_sources,
        "successful_sources": self.successful_sources,
        "total_animals_found": self.total_animals_found,
        "total_duration_ms": self.total_duration_ms,
      },
      "results": [r.to_dict() for r in self.results],
    }
