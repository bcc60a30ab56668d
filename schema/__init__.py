"""
Schema Package

Contains all data models for the shelter pet aggregator.

Modules:
- animal_schema: canonical enums, ScrapedAnimal and StoredAnimal
- shelter_schema: static ShelterMetadata
- scrape_schema: adapter results, run logs and run summaries
"""

from .animal_schema import (
  Species,
  AgeGroup,
  Gender,
  Size,
  ATTRIBUTE_FLAGS,
  MUTABLE_FIELDS,
  ScrapedAnimal,
  StoredAnimal,
  AnimalPhoto,
  get_current_timestamp,
)

from .shelter_schema import ShelterMetadata

from .scrape_schema import (
  ScrapeResult,
  ScrapeRunLog,
  ReconcileStats,
  SourceRunResult,
  RunSummary,
)

__all__ = [
  # Animal schema
  'Species',
  'AgeGroup',
  'Gender',
  'Size',
  'ATTRIBUTE_FLAGS',
  'MUTABLE_FIELDS',
  'ScrapedAnimal',
  'StoredAnimal',
  'AnimalPhoto',
  'get_current_timestamp',

  # Shelters
  'ShelterMetadata',

  # Scrape runs
  'ScrapeResult',
  'ScrapeRunLog',
  'ReconcileStats',
  'SourceRunResult',
  'RunSummary',
]
