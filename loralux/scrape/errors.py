"""Scrape failure types.

Both kinds are recoverable: the scheduler logs them and waits for the next tick.
"""


class ScrapeError(Exception):
    """Base class for a failed scrape."""


class TransportError(ScrapeError):
    """The request could not be sent or no complete response arrived in time."""


class DecodeError(ScrapeError):
    """A response arrived but its body is not ``{"data": [float, ...]}``."""
