"""Scrape client for lumen sensor readings."""

from __future__ import annotations

from .client import Scraper, SupportsScrape, decode_response
from .errors import DecodeError, ScrapeError, TransportError
from .models import ScrapeResult, ScrapeTarget

__all__ = [
    "DecodeError",
    "ScrapeError",
    "ScrapeResult",
    "ScrapeTarget",
    "Scraper",
    "SupportsScrape",
    "TransportError",
    "decode_response",
]
