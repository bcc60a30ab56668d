"""Shared test fixtures for the shelter scraper test suite."""
import re
from typing import Any, Dict, List, Optional

import pytest
from bs4 import BeautifulSoup

from dal import DAL
from errors import FetchError
from reconcile import ReconciliationEngine
from schema import ScrapedAnimal, Species, AgeGroup, Gender, Size
from scrapers.registry import AdapterRegistry


class FakeFetcher:
  """Stands in for PageFetcher: serves canned pages, records every URL asked for."""

  def __init__(self, pages: Optional[Dict[str, str]] = None, json_pages: Optional[Dict[str, Any]] = None):
    self.pages = pages or {}
    self.json_pages = json_pages or {}
    self.requested: List[str] = []
    self.closed = False

  def __enter__(self):
    return self

  def __exit__(self, exc_type, exc, tb):
    self.closed = True
    return False

  def fetch_html(self, url: str) -> BeautifulSoup:
    self.requested.append(url)
    if url not in self.pages:
      raise FetchError(url, "404 Client Error: Not Found")
    return BeautifulSoup(self.pages[url], "html.parser")

  def fetch_json(self, url: str) -> Any:
    self.requested.append(url)
    if url not in self.json_pages:
      raise FetchError(url, "404 Client Error: Not Found")
    return self.json_pages[url]


class FakeBrowser:
  """Stands in for BrowserSession: intercepted payloads keyed by search page number."""

  def __init__(self, payloads_by_page: Optional[Dict[int, List[Any]]] = None, html: str = "",
               fail_on_start: bool = False):
    self.payloads_by_page = payloads_by_page or {}
    self.html = html
    self.fail_on_start = fail_on_start
    self.loaded: List[str] = []
    self.closed = False

  def __enter__(self):
    if self.fail_on_start:
      raise FetchError("browser", "could not start browser: executable missing")
    return self

  def __exit__(self, exc_type, exc, tb):
    self.closed = True
    return False

  def load_and_intercept(self, url: str, url_fragment: str):
    self.loaded.append(url)
    page_number = int(re.search(r"PageNumber=(\d+)", url).group(1))
    return self.payloads_by_page.get(page_number, []), self.html


@pytest.fixture
def fake_fetcher():
  """Build a FakeFetcher and a factory that always hands back that same instance."""
  def build(pages=None, json_pages=None):
    fetcher = FakeFetcher(pages, json_pages)
    return fetcher, (lambda: fetcher)
  return build


@pytest.fixture
def fake_browser():
  def build(payloads_by_page=None, html="", fail_on_start=False):
    browser = FakeBrowser(payloads_by_page, html, fail_on_start)
    return browser, (lambda: browser)
  return build


@pytest.fixture
def dal(tmp_path) -> DAL:
  """Fresh SQLite store with every configured shelter initialized."""
  store = DAL(str(tmp_path / "shelters_test.db"))
  store.init_database()
  AdapterRegistry().initialize_shelters(store)
  return store


@pytest.fixture
def engine(dal) -> ReconciliationEngine:
  return ReconciliationEngine(dal)


@pytest.fixture
def make_animal():
  """Factory for ScrapedAnimal records with sensible defaults."""
  def build(external_id: str, name: Optional[str] = None, **fields) -> ScrapedAnimal:
    defaults = dict(
      species=Species.DOG,
      breed="Labrador Retriever",
      age=AgeGroup.ADULT,
      gender=Gender.MALE,
      size=Size.LARGE,
    )
    defaults.update(fields)
    return ScrapedAnimal(external_id=external_id, name=name or f"Pet {external_id}", **defaults)
  return build
