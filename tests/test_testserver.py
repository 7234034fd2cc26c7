"""Test server endpoint tests."""

import random

import pytest
from fastapi.testclient import TestClient

from loralux.scrape import decode_response
from loralux.testserver import MAX_POINTS, MIN_POINTS, app, generate_readings


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_generate_readings_bounds():
    rng = random.Random(42)
    for _ in range(50):
        readings = generate_readings(rng)
        assert MIN_POINTS <= len(readings) <= MAX_POINTS
        assert all(0.0 <= r < 1.0 for r in readings)


def test_generate_readings_is_seedable():
    assert generate_readings(random.Random(7)) == generate_readings(random.Random(7))


class TestScrapeEndpoint:
    def test_scrape_returns_readings(self, client: TestClient) -> None:
        resp = client.get("/scrape")
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"data"}
        assert MIN_POINTS <= len(body["data"]) <= MAX_POINTS

    def test_scrape_body_decodes_with_scrape_client(self, client: TestClient) -> None:
        resp = client.get("/scrape")
        result = decode_response(resp.content)
        assert result.data == resp.json()["data"]

    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_lifespan_runs(self) -> None:
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
