"""Tests for the orchestrator and the command line entry point."""
import pytest

import scraper
from dal import DAL
from errors import UnknownSourceError
from schema import ScrapeResult
from scraper import Orchestrator, main
from scrapers.registry import AdapterRegistry
from shelters import SHELTERS, get_shelters_by_source_key


class StubAdapter:
  """Returns one canned animal per location of its source"""

  def __init__(self, source_key, make_animal):
    self.source_key = source_key
    self.name = source_key
    self.make_animal = make_animal
    self.locations = []

  def scrape(self, location=None):
    self.locations.append(location)
    return [
      ScrapeResult(self.source_key, s.slug, s.name, [self.make_animal(f"{s.slug}-1")])
      for s in get_shelters_by_source_key(self.source_key)
      if not location or s.slug == location
    ]


class CrashingAdapter:
  source_key = "la-county"
  name = "LA County Animal Care"

  def scrape(self, location=None):
    raise RuntimeError("browser exploded")


@pytest.fixture
def stubs(make_animal):
  adapters = {}

  def factory_for(key):
    def build():
      adapters[key] = StubAdapter(key, make_animal)
      return adapters[key]
    return build

  return adapters, factory_for


@pytest.fixture
def orchestrator(dal, stubs):
  _, factory_for = stubs
  registry = AdapterRegistry(factories={
    "burbank": factory_for("burbank"),
    "la-county": CrashingAdapter,
    "spcala": factory_for("spcala"),
  })
  return Orchestrator(store=dal, registry=registry)


class TestRunAll:

  def test_one_crashing_source_does_not_stop_the_rest(self, dal, orchestrator) -> None:
    summary = orchestrator.run_all()

    assert summary.total_sources == 1 + 6 + 2
    assert summary.successful_sources == 3
    assert summary.total_animals_found == 3
    crashed = [r for r in summary.results if r.source_key == "la-county"]
    assert len(crashed) == 6
    assert all(not r.success and "browser exploded" in r.error for r in crashed)
    assert dal.get_animal_by_external_id("burbank", "burbank-animal-shelter-1").is_available

  def test_every_location_gets_a_log(self, dal, orchestrator) -> None:
    orchestrator.run_all()
    logs = dal.get_run_logs(limit=100)
    assert len(logs) == 9
    assert sum(1 for log in logs if log.status == "error") == 6

  def test_parallel_matches_sequential(self, dal, orchestrator) -> None:
    summary = orchestrator.run_all(parallel=True, max_workers=3)
    assert [r.source_key for r in summary.results] == ["burbank"] + ["la-county"] * 6 + ["spcala"] * 2
    assert summary.successful_sources == 3
    assert dal.count_animals() == 3

  def test_second_run_updates(self, orchestrator) -> None:
    orchestrator.run_all()
    summary = orchestrator.run_all()
    burbank = [r for r in summary.results if r.source_key == "burbank"][0]
    assert (burbank.added, burbank.updated, burbank.retired) == (0, 1, 0)

  def test_summary_to_dict(self, orchestrator) -> None:
    data = orchestrator.run_all().to_dict()
    assert data["summary"]["total_sources"] == 9
    assert len(data["results"]) == 9


class TestRunOne:

  def test_location_passed_to_adapter(self, orchestrator, stubs) -> None:
    adapters, _ = stubs
    summary = orchestrator.run_one("spcala", "spcala-long-beach")

    assert [r.shelter_slug for r in summary.results] == ["spcala-long-beach"]
    assert adapters["spcala"].locations == ["spcala-long-beach"]

  def test_crash_limited_to_requested_location(self, orchestrator) -> None:
    summary = orchestrator.run_one("la-county", "la-county-castaic")
    assert [r.shelter_slug for r in summary.results] == ["la-county-castaic"]
    assert summary.successful_sources == 0

  def test_unknown_source(self, orchestrator) -> None:
    with pytest.raises(UnknownSourceError) as exc:
      orchestrator.run_one("nowhere")
    assert str(exc.value) == "Unknown source: nowhere"

  def test_location_of_another_source(self, orchestrator) -> None:
    with pytest.raises(UnknownSourceError):
      orchestrator.run_one("burbank", "la-county-carson")

  def test_initializes_shelters_first(self, tmp_path, stubs) -> None:
    _, factory_for = stubs
    store = DAL(str(tmp_path / "empty.db"))
    store.init_database()
    Orchestrator(store=store, registry=AdapterRegistry(factories={"burbank": factory_for("burbank")})).run_one("burbank")

    assert len(store.get_all_shelters()) == len(SHELTERS)
    assert store.count_animals() == 1


class TestScrapeStatus:

  def test_empty_catalog_needs_scrape(self, orchestrator) -> None:
    status = orchestrator.scrape_status()
    assert status == {
      "total_pets": 0,
      "last_scrape": None,
      "is_stale": True,
      "is_incomplete": True,
      "needs_scrape": True,
    }

  def test_fresh_catalog(self, orchestrator, monkeypatch) -> None:
    monkeypatch.setattr(scraper, "MIN_EXPECTED_PETS", 2)
    orchestrator.run_all()
    status = orchestrator.scrape_status()

    assert status["total_pets"] == 3
    assert status["is_stale"] is False
    assert status["needs_scrape"] is False

  def test_too_few_pets_is_incomplete(self, orchestrator) -> None:
    orchestrator.run_all()
    status = orchestrator.scrape_status()
    assert status["is_stale"] is False
    assert status["is_incomplete"] is True
    assert status["needs_scrape"] is True


class TestCli:

  def test_init_only(self, tmp_path) -> None:
    db = str(tmp_path / "cli.db")
    assert main(["--init-only", "--db", db]) == 0
    assert len(DAL(db).get_all_shelters()) == len(SHELTERS)

  def test_list_sources(self, tmp_path, capsys) -> None:
    assert main(["--list", "--db", str(tmp_path / "cli.db")]) == 0
    out = capsys.readouterr().out
    assert "la-county (6 locations)" in out
    assert "spcala-long-beach" in out

  def test_unknown_source_exit_code(self, tmp_path) -> None:
    assert main(["--source", "nowhere", "--db", str(tmp_path / "cli.db")]) == 2

  def test_location_requires_source(self, tmp_path) -> None:
    with pytest.raises(SystemExit):
      main(["--location", "la-county-carson", "--db", str(tmp_path / "cli.db")])

  def test_status_json(self, tmp_path, capsys) -> None:
    assert main(["--status", "--db", str(tmp_path / "cli.db")]) == 0
    assert '"needs_scrape": true' in capsys.readouterr().out
