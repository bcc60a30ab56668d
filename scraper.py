#!/usr/bin/env python3
"""
LA Shelter Scraper - Main Runner
v1.0.0

Runs one or all source adapters, reconciles every per-location result into
the record store and prints a run summary. One failing source never stops
the others.

Usage:
  python scraper.py                          # Scrape every source
  python scraper.py --parallel               # Scrape sources in a thread pool
  python scraper.py --source la-county       # One source
  python scraper.py --source spcala --location spcala-long-beach
  python scraper.py --init-only              # Only write shelter metadata
  python scraper.py --status                 # Freshness of the catalog
  python scraper.py --logs                   # Recent scrape logs
  python scraper.py --list                   # Registered sources
"""
import argparse
import json
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from config import SCRAPE_MAX_WORKERS, STALE_AFTER_HOURS, MIN_EXPECTED_PETS
from dal import DAL, get_dal
from errors import UnknownSourceError
from reconcile import ReconciliationEngine
from schema import ScrapeResult, SourceRunResult, RunSummary
from scrapers.registry import AdapterRegistry


class Orchestrator:
  """
  Scrape -> reconcile driver.

  Scrapes may run in worker threads (each adapter owns its own session), but
  every store write happens on the calling thread.
  """

  def __init__(self, store: Optional[DAL] = None, registry: Optional[AdapterRegistry] = None,
               engine: Optional[ReconciliationEngine] = None):
    self.store = store or get_dal()
    self.registry = registry or AdapterRegistry()
    self.engine = engine or ReconciliationEngine(self.store)

  def initialize_shelter_metadata(self) -> int:
    return self.registry.initialize_shelters(self.store)

  # ============================================
  # Runs
  # ============================================

  def run_all(self, parallel: bool = False, max_workers: int = SCRAPE_MAX_WORKERS) -> RunSummary:
    started = time.time()
    self._print_header("all sources")
    self.initialize_shelter_metadata()

    keys = self.registry.source_keys()
    results: List[SourceRunResult] = []
    if parallel and len(keys) > 1:
      with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {key: pool.submit(self._scrape, key) for key in keys}
        for key in keys:
          results.extend(self._reconcile_all(futures[key].result()))
    else:
      for key in keys:
        results.extend(self._reconcile_all(self._scrape(key)))

    summary = RunSummary(results, int((time.time() - started) * 1000))
    self._print_summary(summary)
    return summary

  def run_one(self, source_key: str, location: Optional[str] = None) -> RunSummary:
    """Scrape one source, optionally one of its locations"""
    if not self.registry.has_source(source_key):
      raise UnknownSourceError(source_key)
    if location and location not in [s.slug for s in self.registry.list_shelter_metadata_by_source_key(source_key)]:
      raise UnknownSourceError(location)

    started = time.time()
    self._print_header(source_key)
    self.initialize_shelter_metadata()

    results = self._reconcile_all(self._scrape(source_key, location))
    summary = RunSummary(results, int((time.time() - started) * 1000))
    self._print_summary(summary)
    return summary

  def _scrape(self, source_key: str, location: Optional[str] = None) -> List[ScrapeResult]:
    """Run one adapter. Anything it raises becomes a failed result per location."""
    started = time.time()
    try:
      return self.registry.get_adapter(source_key).scrape(location)
    except Exception as e:
      print(f"  ❌ {source_key} adapter crashed: {e}")
      duration_ms = int((time.time() - started) * 1000)
      return [
        ScrapeResult(source_key, s.slug, s.name, [], success=False, error=str(e), duration_ms=duration_ms)
        for s in self.registry.list_shelter_metadata_by_source_key(source_key)
        if not location or s.slug == location
      ]

  def _reconcile_all(self, scrape_results: List[ScrapeResult]) -> List[SourceRunResult]:
    results = []
    for result in scrape_results:
      try:
        stats = self.engine.record_result(result)
      except Exception as e:
        print(f"  ❌ Could not reconcile {result.shelter_slug}: {e}")
        results.append(SourceRunResult(
          source_key=result.source_key,
          shelter_slug=result.shelter_slug,
          shelter_name=result.shelter_name,
          success=False,
          animals_found=len(result.animals),
          duration_ms=result.duration_ms,
          error=str(e),
        ))
        continue

      results.append(SourceRunResult(
        source_key=result.source_key,
        shelter_slug=result.shelter_slug,
        shelter_name=result.shelter_name,
        success=result.success,
        animals_found=len(result.animals),
        added=stats.added,
        updated=stats.updated,
        retired=stats.retired,
        failed=stats.failed,
        duration_ms=result.duration_ms + stats.duration_ms,
        error=result.error,
      ))
    return results

  # ============================================
  # Status
  # ============================================

  def scrape_status(self) -> Dict:
    """Whether the catalog is fresh enough or a scrape should be triggered"""
    total_pets = self.store.count_animals()
    last_scrape = self.store.get_last_successful_scrape()

    is_stale = True
    if last_scrape:
      is_stale = datetime.now() - datetime.fromisoformat(last_scrape) > timedelta(hours=STALE_AFTER_HOURS)
    is_incomplete = total_pets < MIN_EXPECTED_PETS

    return {
      "total_pets": total_pets,
      "last_scrape": last_scrape,
      "is_stale": is_stale,
      "is_incomplete": is_incomplete,
      "needs_scrape": is_stale or is_incomplete,
    }

  # ============================================
  # Output
  # ============================================

  def _print_header(self, target: str):
    print("\n" + "=" * 60)
    print(f"🐾 LA SHELTER SCRAPER - {target}")
    print(f"   Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 60)

  def _print_summary(self, summary: RunSummary):
    print("\n" + "=" * 60)
    print("📊 SCRAPE COMPLETE")
    print("=" * 60)
    print(f"   Locations: {summary.successful_sources}/{summary.total_sources} succeeded")
    print(f"   Animals found: {summary.total_animals_found}")
    print(f"   Duration: {summary.total_duration_ms / 1000:.1f}s")
    failed = [r for r in summary.results if not r.success]
    if failed:
      print(f"   Errors: {len(failed)}")
      for r in failed:
        print(f"     - {r.shelter_name}: {r.error}")


# ============================================
# Module-level entry points
# ============================================

_default_orchestrator: Optional[Orchestrator] = None

def get_orchestrator() -> Orchestrator:
  """Get the default orchestrator (default DAL and registry)"""
  global _default_orchestrator
  if _default_orchestrator is None:
    _default_orchestrator = Orchestrator()
  return _default_orchestrator


def run_all(parallel: bool = False) -> RunSummary:
  return get_orchestrator().run_all(parallel=parallel)


def run_one(source_key: str, location: Optional[str] = None) -> RunSummary:
  return get_orchestrator().run_one(source_key, location)


def initialize_shelter_metadata() -> int:
  return get_orchestrator().initialize_shelter_metadata()


# ============================================
# CLI
# ============================================

def show_logs(store: DAL, limit: int = 20, source_key: Optional[str] = None):
  """Show recent scrape logs"""
  print("\n📋 RECENT SCRAPE LOGS")
  print("-" * 40)
  for log in store.get_run_logs(limit=limit, source_key=source_key):
    icon = "✅" if log.status == "success" else "❌"
    print(f"  {icon} {log.created_at[:19]} | {log.shelter_slug} | found {log.pets_found}, "
          f"+{log.pets_added} ~{log.pets_updated} -{log.pets_removed}")
    if log.error_message:
      print(f"      {log.error_message}")


def show_sources(registry: AdapterRegistry):
  """List registered sources and their locations"""
  print("\n🏠 REGISTERED SOURCES")
  print("-" * 40)
  for key in registry.source_keys():
    shelters = registry.list_shelter_metadata_by_source_key(key)
    print(f"  {key} ({len(shelters)} locations)")
    for shelter in shelters:
      print(f"    - {shelter.slug}: {shelter.name}, {shelter.city}")


def main(argv: Optional[List[str]] = None) -> int:
  parser = argparse.ArgumentParser(description="LA Shelter Scraper v1.0")
  parser.add_argument("--source", type=str, help="Scrape a single source key")
  parser.add_argument("--location", type=str, help="Restrict --source to one shelter slug")
  parser.add_argument("--parallel", action="store_true", help="Scrape sources in parallel")
  parser.add_argument("--init-only", action="store_true", help="Only initialize shelter metadata")
  parser.add_argument("--status", action="store_true", help="Show catalog freshness")
  parser.add_argument("--logs", action="store_true", help="Show recent scrape logs")
  parser.add_argument("--list", action="store_true", help="List registered sources")
  parser.add_argument("--json", action="store_true", help="Print the run summary as JSON")
  parser.add_argument("--db", type=str, help="Database path (default: SHELTER_DB_PATH)")

  args = parser.parse_args(argv)
  if args.location and not args.source:
    parser.error("--location requires --source")

  store = DAL(args.db) if args.db else get_dal()
  store.init_database()
  orchestrator = Orchestrator(store=store)

  if args.list:
    show_sources(orchestrator.registry)
    return 0
  if args.logs:
    show_logs(store, source_key=args.source)
    return 0
  if args.status:
    print(json.dumps(orchestrator.scrape_status(), indent=2))
    return 0
  if args.init_only:
    orchestrator.initialize_shelter_metadata()
    return 0

  try:
    if args.source:
      summary = orchestrator.run_one(args.source, args.location)
    else:
      summary = orchestrator.run_all(parallel=args.parallel)
  except UnknownSourceError as e:
    print(f"❌ {e}")
    return 2

  if args.json:
    print(json.dumps(summary.to_dict(), indent=2))
  return 0 if summary.successful_sources == summary.total_sources else 1


if __name__ == "__main__":
  raise SystemExit(main())
