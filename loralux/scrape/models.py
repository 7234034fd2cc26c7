"""Data models for the scrape submodule."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class ScrapeTarget:
    """The endpoint a scraper polls and the total deadline for one request."""

    url: str
    timeout: float  # seconds

    @classmethod
    def from_address(cls, address: str, endpoint: str, timeout: float) -> ScrapeTarget:
        return cls(url=f"{address}{endpoint}", timeout=timeout)


class ScrapeResult(BaseModel):
    """Lumen sensor readings returned by one scrape, in server order."""

    # Strict so that strings, booleans and nulls are rejected instead of coerced;
    # NaN, Infinity and overflowing literals like 1e400 are not valid readings.
    model_config = ConfigDict(strict=True, frozen=True, allow_inf_nan=False)

    data: list[float]
