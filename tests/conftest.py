"""Shared fixtures for quake_intel tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from quake_intel.errors import EventNotFound
from quake_intel.fetchers.usgs import RangeQuery
from quake_intel.models import FeedPayload

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

Feature = dict[str, Any]


def make_feature(
    feature_id: str,
    mag: float | None,
    lat: float,
    lon: float,
    depth: float = 10.0,
    place: str | None = "Somewhere",
    time_ms: int = 1700000000000,
    sig: int | None = None,
) -> Feature:
    """A USGS-shaped GeoJSON feature; note coordinates are [lon, lat, depth]."""
    return {
        "type": "Feature",
        "id": feature_id,
        "properties": {
            "mag": mag,
            "magType": "ml",
            "place": place,
            "time": time_ms,
            "updated": time_ms + 60000,
            "url": f"https://earthquake.usgs.gov/earthquakes/eventpage/{feature_id}",
            "felt": None,
            "alert": None,
            "tsunami": 0,
            "sig": sig,
        },
        "geometry": {"type": "Point", "coordinates": [lon, lat, depth]},
    }


def make_payload(features: list[Feature], count: int | None = None) -> FeedPayload:
    return FeedPayload(
        count=len(features) if count is None else count,
        features=tuple(features),
    )


class StubFeedClient:
    """In-memory stand-in for FeedClient that records every call.

    ``feeds`` maps feed ids to payloads (or exceptions to raise),
    ``range_handler`` answers range queries, ``events`` answers lookups.
    """

    def __init__(self) -> None:
        self.feeds: dict[str, FeedPayload | Exception] = {}
        self.range_handler: Callable[[RangeQuery], FeedPayload] | None = None
        self.events: dict[str, Feature] = {}
        self.calls: list[tuple[str, Any]] = []

    def fetch_feed(self, feed: str) -> FeedPayload:
        self.calls.append(("feed", feed))
        result = self.feeds[feed]
        if isinstance(result, Exception):
            raise result
        return result

    def query_range(self, query: RangeQuery) -> FeedPayload:
        self.calls.append(("range", query))
        if self.range_handler is None:
            raise AssertionError("unexpected range query")
        return self.range_handler(query)

    def fetch_by_id(self, event_id: str) -> Feature:
        self.calls.append(("event", event_id))
        if event_id not in self.events:
            raise EventNotFound(event_id)
        return self.events[event_id]


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_feed_response() -> dict:
    return json.loads((FIXTURES_DIR / "feed_sample.json").read_text())


@pytest.fixture
def sample_event_response() -> dict:
    return json.loads((FIXTURES_DIR / "event_sample.json").read_text())


@pytest.fixture
def sample_payload(sample_feed_response: dict) -> FeedPayload:
    return FeedPayload(
        count=sample_feed_response["metadata"]["count"],
        features=tuple(sample_feed_response["features"]),
        title=sample_feed_response["metadata"]["title"],
    )


@pytest.fixture
def stub_client() -> StubFeedClient:
    return StubFeedClient()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def feature() -> Callable[..., Feature]:
    return make_feature


@pytest.fixture
def payload() -> Callable[..., FeedPayload]:
    return make_payload
