"""
Reconciliation engine
v1.0.0

Merges one fresh scrape batch into stored state for a source (optionally one
location of it):

  - upsert every scraped animal by (source_key, external_id)
  - replace each animal's photo set wholesale, in the same transaction
  - retire stored animals of the same scope that were not scraped this time
  - stamp the shelter's last scrape time
  - append one run log row, even when the adapter failed

A failure saving one animal is logged and counted; the rest of the batch is
still written. The run log write is best-effort and never hides the result.
"""
import time
from typing import List, Optional

from dal import RecordStore
from errors import UnknownSourceError
from schema import ScrapedAnimal, ScrapeResult, ScrapeRunLog, ReconcileStats, get_current_timestamp


class ReconciliationEngine:

  def __init__(self, store: RecordStore):
    self.store = store

  def reconcile(self, source_key: str, animals: List[ScrapedAnimal],
                shelter_slug: Optional[str] = None, scrape_duration_ms: int = 0) -> ReconcileStats:
    """
    Reconcile a batch for source_key. With shelter_slug only that location's
    stored animals are candidates for retirement.

    Raises UnknownSourceError if the source (or slug) has no stored shelter.
    """
    started = time.time()
    shelters = self.store.get_shelters_by_source(source_key)
    if shelter_slug:
      shelters = [s for s in shelters if s["slug"] == shelter_slug]
    if not shelters:
      print(f"  ❌ Unknown shelter for {source_key}" + (f"/{shelter_slug}" if shelter_slug else ""))
      raise UnknownSourceError(shelter_slug or source_key)

    shelter = shelters[0]
    slug = shelter["slug"]
    now = get_current_timestamp()

    known = self.store.get_animal_ids_for_source(source_key)
    in_scope = self.store.get_animal_ids_for_source(source_key, shelter_slug) if shelter_slug else known

    stats = ReconcileStats()
    seen = set()
    for animal in animals:
      existed = animal.external_id in known or animal.external_id in seen
      seen.add(animal.external_id)
      try:
        self.store.save_animal(source_key, slug, animal, now)
      except Exception as e:
        stats.failed += 1
        print(f"  ❌ Error saving {animal.name} ({animal.external_id}): {e}")
        continue
      if existed:
        stats.updated += 1
      else:
        stats.added += 1

    for external_id, (animal_id, is_available) in in_scope.items():
      if not is_available or external_id in seen:
        continue
      try:
        self.store.set_availability(animal_id, False)
        stats.retired += 1
      except Exception as e:
        stats.failed += 1
        print(f"  ❌ Error retiring {external_id}: {e}")

    for row in shelters:
      self.store.mark_shelter_scraped(row["slug"], now)

    stats.duration_ms = int((time.time() - started) * 1000)
    print(f"  📊 {slug}: {len(animals)} found, +{stats.added} new, "
          f"{stats.updated} updated, -{stats.retired} retired"
          + (f", {stats.failed} failed" if stats.failed else ""))

    self._write_log(ScrapeRunLog(
      source_key=source_key,
      shelter_slug=slug,
      shelter_name=shelter["name"],
      status="success",
      pets_found=len(animals),
      pets_added=stats.added,
      pets_updated=stats.updated,
      pets_removed=stats.retired,
      pets_failed=stats.failed,
      duration_ms=scrape_duration_ms + stats.duration_ms,
      created_at=now,
    ))
    return stats

  def record_result(self, result: ScrapeResult) -> ReconcileStats:
    """Reconcile one adapter result. A failed result only writes an error log."""
    if not result.success:
      print(f"  ❌ {result.shelter_name}: {result.error}")
      self._write_log(ScrapeRunLog(
        source_key=result.source_key,
        shelter_slug=result.shelter_slug,
        shelter_name=result.shelter_name,
        status="error",
        error_message=result.error or "Unknown error",
        duration_ms=result.duration_ms,
        created_at=get_current_timestamp(),
      ))
      return ReconcileStats(duration_ms=0)

    return self.reconcile(result.source_key, result.animals, result.shelter_slug,
                          scrape_duration_ms=result.duration_ms)

  def _write_log(self, log: ScrapeRunLog):
    try:
      self.store.insert_run_log(log)
    except Exception as e:
      print(f"  ⚠️ Could not write scrape log for {log.shelter_slug}: {e}")
