"""
Headless browser resource for client-rendered sources
v1.0.0 - Playwright sync API, Browserless remote or local Chromium

Used by sources whose listing is rendered client-side. Rather than scraping the
rendered DOM, the session records the JSON responses the page requests while it
loads. Always use as a context manager so the browser and the Playwright driver
are released on every exit path.
"""
from typing import Any, List, Optional, Tuple

from playwright.sync_api import sync_playwright, Error as PlaywrightError

from config import (
  BROWSERLESS_API_KEY, BROWSERLESS_WS_URL, BROWSER_TIMEOUT_MS,
  BROWSER_SETTLE_MS, USER_AGENT,
)
from errors import FetchError


class BrowserSession:
  """One browser, one page. Not shared between adapter runs."""

  def __init__(self, api_key: Optional[str] = None, timeout_ms: Optional[int] = None,
               settle_ms: Optional[int] = None):
    self.api_key = BROWSERLESS_API_KEY if api_key is None else api_key
    self.timeout_ms = timeout_ms or BROWSER_TIMEOUT_MS
    self.settle_ms = BROWSER_SETTLE_MS if settle_ms is None else settle_ms
    self._playwright = None
    self._browser = None
    self._page = None

  def __enter__(self) -> "BrowserSession":
    self.start()
    return self

  def __exit__(self, exc_type, exc, tb):
    self.close()
    return False

  def start(self):
    try:
      self._playwright = sync_playwright().start()
      chromium = self._playwright.chromium
      if self.api_key:
        print("  🌐 Connecting to Browserless...")
        self._browser = chromium.connect_over_cdp(
          BROWSERLESS_WS_URL.format(token=self.api_key),
          timeout=self.timeout_ms,
        )
      else:
        print("  🎭 Launching local headless Chromium")
        self._browser = chromium.launch(
          headless=True,
          args=["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"],
        )
      self._page = self._browser.new_page(user_agent=USER_AGENT)
    except PlaywrightError as e:
      self.close()
      raise FetchError("browser", f"could not start browser: {e}") from e

  def load_and_intercept(self, url: str, url_fragment: str) -> Tuple[List[Any], str]:
    """
    Navigate to url and capture every JSON response whose URL contains
    url_fragment.

    Returns (payloads, html) where payloads are the decoded JSON bodies in
    arrival order and html is the rendered page after the settle delay.
    """
    if self._page is None:
      raise FetchError(url, "browser session is not started")

    captured = []

    def on_response(response):
      if url_fragment in response.url:
        captured.append(response)

    self._page.on("response", on_response)
    try:
      print(f"  🔍 Loading: {url}")
      self._page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
      self._page.wait_for_timeout(self.settle_ms)
      html = self._page.content()
    except PlaywrightError as e:
      raise FetchError(url, str(e)) from e
    finally:
      self._page.remove_listener("response", on_response)

    payloads = []
    for response in captured:
      try:
        payloads.append(response.json())
      except (PlaywrightError, ValueError):
        # Not JSON (or body already gone); skip it
        continue
    if payloads:
      print(f"  ↳ Intercepted {len(payloads)} API responses")
    return payloads, html

  def close(self):
    if self._browser is not None:
      try:
        self._browser.close()
      except PlaywrightError as e:
        print(f"  ⚠️ Error closing browser: {e}")
      self._browser = None
      self._page = None
    if self._playwright is not None:
      self._playwright.stop()
      self._playwright = None
