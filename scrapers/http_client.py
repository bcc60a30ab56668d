"""
HTTP fetch resource shared by the adapters

One PageFetcher per adapter run. It owns its requests.Session and must be
closed when the run ends, so use it as a context manager.
"""
from typing import Any, Optional

import requests
from bs4 import BeautifulSoup

from config import USER_AGENT, HTTP_TIMEOUT
from errors import FetchError


HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
JSON_ACCEPT = "application/json"


class PageFetcher:
  """Session-backed fetcher with an explicit timeout on every request"""

  def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
    self.timeout = timeout or HTTP_TIMEOUT
    self.session = session or requests.Session()
    self.session.headers.update({"User-Agent": USER_AGENT})

  def __enter__(self) -> "PageFetcher":
    return self

  def __exit__(self, exc_type, exc, tb):
    self.close()
    return False

  def close(self):
    self.session.close()

  def _get(self, url: str, accept: str) -> requests.Response:
    print(f"  🔍 Fetching: {url}")
    try:
      response = self.session.get(url, headers={"Accept": accept}, timeout=self.timeout)
      response.raise_for_status()
    except requests.RequestException as e:
      print(f"  ❌ Error fetching {url}: {e}")
      raise FetchError(url, str(e)) from e
    return response

  def fetch_text(self, url: str) -> str:
    return self._get(url, HTML_ACCEPT).text

  def fetch_html(self, url: str) -> BeautifulSoup:
    """Fetch and parse a webpage"""
    response = self._get(url, HTML_ACCEPT)
    return BeautifulSoup(response.content, "html.parser")

  def fetch_json(self, url: str) -> Any:
    """Fetch a JSON document. A body that is not JSON counts as a fetch failure."""
    response = self._get(url, JSON_ACCEPT)
    try:
      return response.json()
    except ValueError as e:
      raise FetchError(url, f"invalid JSON: {e}") from e
