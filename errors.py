"""
Exceptions raised by the scraping and reconciliation pipeline
"""


class ScraperError(Exception):
  """Base class for pipeline errors"""


class FetchError(ScraperError):
  """A source could not be reached or answered with a non-2xx status"""

  def __init__(self, url: str, reason: str):
    super().__init__(f"{url}: {reason}")
    self.url = url
    self.reason = reason


class UnknownSourceError(ScraperError, KeyError):
  """Source key (or shelter slug) is not registered"""

  def __init__(self, key: str):
    super().__init__(key)
    self.key = key

  def __str__(self) -> str:
    return f"Unknown source: {self.key}"
