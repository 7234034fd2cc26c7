"""Shared fixtures: mock-transport scraper and logger cleanup."""

import logging

import httpx
import pytest
import pytest_asyncio
from pythonjsonlogger.json import JsonFormatter

from loralux.config import get_settings
from loralux.scrape import ScrapeTarget, Scraper

TARGET_URL = "http://lorawan.test/scrape"


@pytest.fixture
def target() -> ScrapeTarget:
    return ScrapeTarget(url=TARGET_URL, timeout=1.0)


@pytest_asyncio.fixture
async def make_scraper(target: ScrapeTarget):
    """Build Scrapers whose requests are answered by *handler*; closed after the test."""
    created: list[Scraper] = []

    def _make(handler, scrape_target: ScrapeTarget | None = None) -> Scraper:
        transport = httpx.MockTransport(handler)
        scraper = Scraper(scrape_target or target, transport=transport)
        created.append(scraper)
        return scraper

    yield _make
    for scraper in created:
        await scraper.aclose()


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_loggers():
    """Undo setup_logging() changes to the root, httpx and uvicorn loggers."""
    root = logging.getLogger()
    root_level = root.level
    saved = {}
    for name in ("httpx", "httpcore", "uvicorn", "uvicorn.access", "uvicorn.error"):
        lg = logging.getLogger(name)
        saved[name] = (list(lg.handlers), lg.level, lg.propagate)
    yield
    # pytest swaps its own capture handlers on the root logger between phases,
    # so only drop the JSON handler instead of restoring a snapshot
    root.handlers[:] = [h for h in root.handlers if not isinstance(h.formatter, JsonFormatter)]
    root.setLevel(root_level)
    for name, (handlers, level, propagate) in saved.items():
        lg = logging.getLogger(name)
        lg.handlers[:] = handlers
        lg.setLevel(level)
        lg.propagate = propagate
