"""HTTP scrape client for the LoRaWAN server's lumen readings."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from .errors import DecodeError, TransportError
from .models import ScrapeResult, ScrapeTarget

logger = logging.getLogger(__name__)


class SupportsScrape(Protocol):
    """Protocol for anything the scheduler can poll."""

    @property
    def target(self) -> ScrapeTarget: ...

    async def scrape(self) -> ScrapeResult: ...


def decode_response(body: bytes) -> ScrapeResult:
    """Decode a ``{"data": [...]}`` body, raising ``DecodeError`` on any mismatch."""
    try:
        return ScrapeResult.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"decode response body: {exc}") from exc


class Scraper:
    """Scrapes a single target, one bounded GET per call.

    The underlying ``httpx.AsyncClient`` is built once here and never
    reconfigured, so it is safe to share between successive scrapes.
    """

    def __init__(
        self,
        target: ScrapeTarget,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._target = target
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(target.timeout),
            transport=transport,
        )

    @property
    def target(self) -> ScrapeTarget:
        return self._target

    async def scrape(self) -> ScrapeResult:
        """Fetch and decode the target once.

        ``timeout`` bounds the whole exchange, body read included. Raises
        ``TransportError`` or ``DecodeError``; never retries.
        """
        try:
            body = await asyncio.wait_for(self._fetch(), timeout=self._target.timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"do scrape request: no response within {self._target.timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"do scrape request: {exc!r}") from exc

        result = decode_response(body)
        logger.debug("scrape decoded", extra={"url": self._target.url, "points": len(result.data)})
        return result

    async def _fetch(self) -> bytes:
        # Leaving the stream context releases the connection, also on cancellation.
        async with self._client.stream("GET", self._target.url) as response:
            return await response.aread()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Scraper:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
