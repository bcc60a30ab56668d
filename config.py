"""
Configuration for the LA shelter pet aggregator

Values can be overridden through environment variables so the same code runs
locally, from cron, and in CI.
"""
import os

# Database configuration
DB_PATH = os.environ.get("SHELTER_DB_PATH", "shelters.db")

# Network settings
HTTP_TIMEOUT = int(os.environ.get("HTTP_TIMEOUT", 30))  # seconds, per request
BROWSER_TIMEOUT_MS = int(os.environ.get("BROWSER_TIMEOUT_MS", 45000))
BROWSER_SETTLE_MS = int(os.environ.get("BROWSER_SETTLE_MS", 2000))

# Remote browser (Browserless). Local headless Chromium is used when empty.
BROWSERLESS_API_KEY = os.environ.get("BROWSERLESS_API_KEY", "")
BROWSERLESS_WS_URL = "wss://chrome.browserless.io?token={token}"

# Scraper tuning
LA_COUNTY_MAX_PAGES = int(os.environ.get("LA_COUNTY_MAX_PAGES", 10))
SPCALA_FETCH_DETAILS = os.environ.get("SPCALA_FETCH_DETAILS", "").lower() in ("1", "true", "yes")
SCRAPE_MAX_WORKERS = int(os.environ.get("SCRAPE_MAX_WORKERS", 4))

# Freshness thresholds for scrape_status()
STALE_AFTER_HOURS = 1
MIN_EXPECTED_PETS = 50

# Keys the embedded-script scanner looks for
EMBEDDED_ARRAY_KEYS = ["animals", "pets", "adoptables", "results"]

# User agent for web requests
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
