"""
Shelter source adapters package
"""
from scrapers.http_client import PageFetcher
from scrapers.browser import BrowserSession
from scrapers.generic_shelter import ShelterSiteAdapter, SiteConfig
from scrapers.la_county import LACountyAdapter
from scrapers.registry import AdapterRegistry

__all__ = [
  "PageFetcher",
  "BrowserSession",
  "ShelterSiteAdapter",
  "SiteConfig",
  "LACountyAdapter",
  "AdapterRegistry",
]
