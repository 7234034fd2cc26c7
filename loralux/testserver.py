"""testserverd: FastAPI app that serves random lumen readings on /scrape.

Stands in for the LoRaWAN server during local runs:

    testserverd --port 8080
"""

from __future__ import annotations

import argparse
import logging
import random
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from loralux.logging_config import setup_logging
from loralux.scrape import ScrapeResult

SERVICE_NAME = "testserverd"

MIN_POINTS = 10
MAX_POINTS = 50

logger = logging.getLogger(__name__)

_rng = random.Random()


def generate_readings(rng: random.Random = _rng) -> list[float]:
    """Between MIN_POINTS and MAX_POINTS readings, each in [0, 1)."""
    points = rng.randint(MIN_POINTS, MAX_POINTS)
    return [rng.random() for _ in range(points)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("server started")
    yield
    logger.info("shutting down test server")


app = FastAPI(title="LoRaWAN Test Server", lifespan=lifespan)


@app.get("/scrape", response_model=ScrapeResult)
async def scrape() -> ScrapeResult:
    data = generate_readings()
    logger.info("/scrape invoked", extra={"points": len(data)})
    return ScrapeResult(data=data)


@app.get("/health")
async def health():
    return {"status": "ok"}


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(prog=SERVICE_NAME, description="Serve random lumen readings")
    ap.add_argument("--host", default="0.0.0.0")
    ap.add_argument("--port", type=int, default=8080)
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    setup_logging(args.log_level, service=SERVICE_NAME)
    logger.info("starting test server", extra={"address": f"{args.host}:{args.port}"})
    # log_config=None keeps the JSON handlers installed above
    uvicorn.run(app, host=args.host, port=args.port, log_config=None, timeout_graceful_shutdown=10)


if __name__ == "__main__":
    main()
