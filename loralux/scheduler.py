"""Scrape scheduler: polls the scraper on a fixed interval until shutdown.

The loop is strictly serial: a tick awaits its scrape to completion before the
scheduler waits again, so two scrapes never overlap. Shutdown is only observed
at the wait point; an in-flight scrape is never cancelled and is bounded by
the scraper's own timeout.
"""

from __future__ import annotations

import asyncio
import logging
import math
import signal
from enum import Enum

from loralux.scrape import ScrapeError, SupportsScrape

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SchedulerState(str, Enum):
    WAITING = "waiting"
    SCRAPING = "scraping"
    DRAINING = "draining"


def next_deadline(previous: float, now: float, interval: float) -> float:
    """Return the next tick on the ``previous + k * interval`` grid not before *now*.

    Ticks that fell due while a slow scrape was running are dropped.
    """
    deadline = previous + interval
    if deadline < now:
        missed = math.floor((now - deadline) / interval) + 1
        deadline += missed * interval
    return deadline


class ScrapeScheduler:
    """Runs one scrape per tick until the shutdown event is set."""

    def __init__(
        self,
        scraper: SupportsScrape,
        interval: float,
        shutdown: asyncio.Event,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._scraper = scraper
        self._interval = interval
        self._shutdown = shutdown
        self._state = SchedulerState.WAITING

    @property
    def state(self) -> SchedulerState:
        return self._state

    async def run(self) -> None:
        """Scrape on every tick; return once shutdown is observed.

        A failed scrape is logged and skipped. Exceptions other than
        ``ScrapeError`` propagate.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._interval
        self._state = SchedulerState.WAITING

        logger.info(
            "starting to scrape server",
            extra={"interval": self._interval, "url": self._scraper.target.url},
        )

        while await self._wait_for_tick(loop, deadline):
            self._state = SchedulerState.SCRAPING
            try:
                await self._tick()
            finally:
                self._state = SchedulerState.WAITING
            deadline = next_deadline(deadline, loop.time(), self._interval)

        self._state = SchedulerState.DRAINING
        logger.info("shutdown signal received, attempting to shutdown gracefully")

    async def _wait_for_tick(self, loop: asyncio.AbstractEventLoop, deadline: float) -> bool:
        """Block until *deadline*. Returns ``False`` if shutdown arrives first."""
        # A shutdown already pending wins over a tick that is already due.
        if self._shutdown.is_set():
            return False

        delay = deadline - loop.time()
        if delay <= 0:
            return True
        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    async def _tick(self) -> None:
        try:
            result = await self._scraper.scrape()
        except ScrapeError as exc:
            logger.warning(
                "error encountered while scraping server",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return

        logger.info("successfully scraped server", extra={"points": len(result.data)})


def relay_shutdown_signals(shutdown: asyncio.Event) -> None:
    """Set *shutdown* when the process receives SIGINT or SIGTERM.

    Must be called from within the running event loop.
    """
    loop = asyncio.get_running_loop()

    def _notify(signum: int) -> None:
        logger.debug("received signal", extra={"signal": signal.Signals(signum).name})
        shutdown.set()

    for sig in SHUTDOWN_SIGNALS:
        try:
            loop.add_signal_handler(sig, _notify, sig)
        except NotImplementedError:
            # Event loops without add_signal_handler (Windows): relay from the
            # Python-level handler onto the loop thread instead.
            signal.signal(
                sig,
                lambda signum, frame: loop.call_soon_threadsafe(_notify, signum),
            )
