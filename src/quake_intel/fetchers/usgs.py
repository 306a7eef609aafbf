"""USGS earthquake feed client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from requests import Response, Session
from requests.exceptions import RequestException

from quake_intel.config import QuakeIntelConfig
from quake_intel.errors import (
    EventNotFound,
    UpstreamMalformed,
    UpstreamUnavailable,
    ValidationError,
)
from quake_intel.http import create_session
from quake_intel.models import FeedPayload

logger = logging.getLogger(__name__)

FEED_TIERS: tuple[str, ...] = ("significant", "4.5", "2.5", "1.0", "all")
FEED_TIMEFRAMES: tuple[str, ...] = ("hour", "day", "week", "month")

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def feed_id(tier: str, timeframe: str) -> str:
    """Build a summary feed id such as ``4.5_week``."""
    if tier not in FEED_TIERS:
        raise ValidationError(f"Unknown feed tier {tier!r}", fields=("tier",))
    if timeframe not in FEED_TIMEFRAMES:
        raise ValidationError(f"Unknown feed timeframe {timeframe!r}", fields=("timeframe",))
    return f"{tier}_{timeframe}"


def _check_feed_id(value: str) -> None:
    tier, sep, timeframe = value.rpartition("_")
    if not sep:
        raise ValidationError(f"Unknown feed {value!r}", fields=("feed",))
    feed_id(tier, timeframe)


@dataclass(frozen=True)
class RangeQuery:
    """A centre/radius/magnitude/time query against the FDSN event service."""

    latitude: float
    longitude: float
    max_radius_km: float
    min_magnitude: float | None = None
    max_magnitude: float | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    order_by: str = "time"
    limit: int | None = None

    def to_params(self) -> dict[str, str | float | int]:
        params: dict[str, str | float | int] = {
            "format": "geojson",
            "latitude": self.latitude,
            "longitude": self.longitude,
            "maxradiuskm": self.max_radius_km,
            "orderby": self.order_by,
        }
        if self.min_magnitude is not None:
            params["minmagnitude"] = self.min_magnitude
        if self.max_magnitude is not None:
            params["maxmagnitude"] = self.max_magnitude
        if self.start_time is not None:
            params["starttime"] = self.start_time.strftime(_TIME_FORMAT)
        if self.end_time is not None:
            params["endtime"] = self.end_time.strftime(_TIME_FORMAT)
        if self.limit is not None:
            params["limit"] = self.limit
        return params


def _parse_collection(data: Any, url: str) -> FeedPayload:
    if not isinstance(data, dict):
        raise UpstreamMalformed(f"Expected a GeoJSON object from {url}")
    metadata = data.get("metadata")
    features = data.get("features")
    count = metadata.get("count") if isinstance(metadata, dict) else None
    if isinstance(count, bool) or not isinstance(count, int):
        raise UpstreamMalformed(f"Response from {url} has no metadata.count")
    if not isinstance(features, list):
        raise UpstreamMalformed(f"Response from {url} has no features list")
    return FeedPayload(
        count=count,
        features=tuple(features),
        title=metadata.get("title"),
    )


class FeedClient:
    """Read-only access to the USGS summary feeds and FDSN event service.

    Every call is a single GET. Any failure raises; nothing is retried
    and nothing is cached.
    """

    def __init__(
        self,
        config: QuakeIntelConfig | None = None,
        session: Session | None = None,
    ) -> None:
        self.config = config or QuakeIntelConfig()
        if session is None:
            session = create_session(
                pool_size=self.config.max_concurrency,
                user_agent=self.config.user_agent,
            )
        self.session = session

    def _get(self, url: str, params: dict[str, Any] | None = None) -> Response:
        logger.debug("GET %s params=%s", url, params)
        try:
            return self.session.get(url, params=params, timeout=self.config.request_timeout)
        except RequestException as exc:
            raise UpstreamUnavailable(f"USGS request failed: {exc}", url=url) from exc

    @staticmethod
    def _json(resp: Response, url: str) -> Any:
        if not resp.ok:
            raise UpstreamUnavailable(
                f"USGS API error: {resp.status_code}",
                url=url,
                upstream_status=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamMalformed(f"Response from {url} is not valid JSON") from exc

    def fetch_feed(self, feed: str) -> FeedPayload:
        """Fetch a pre-aggregated summary feed, e.g. ``significant_week``."""
        _check_feed_id(feed)
        url = f"{self.config.feed_base_url}/{feed}.geojson"
        payload = _parse_collection(self._json(self._get(url), url), url)
        logger.info("Fetched feed %s: %d features", feed, payload.count)
        return payload

    def query_range(self, query: RangeQuery) -> FeedPayload:
        """Run a range query; filtering happens upstream."""
        url = self.config.query_url
        payload = _parse_collection(self._json(self._get(url, query.to_params()), url), url)
        logger.info(
            "Range query (%.4f, %.4f) r=%skm: %d features",
            query.latitude, query.longitude, query.max_radius_km, payload.count,
        )
        return payload

    def fetch_by_id(self, event_id: str) -> dict[str, Any]:
        """Fetch one event as a raw GeoJSON feature.

        The FDSN service signals an unknown id with 404 (or 204); both are
        reported as :class:`EventNotFound`.
        """
        url = self.config.query_url
        resp = self._get(url, {"eventid": event_id, "format": "geojson"})
        if resp.status_code in (204, 404):
            raise EventNotFound(event_id)
        data = self._json(resp, url)
        if isinstance(data, dict) and data.get("type") == "FeatureCollection":
            features = data.get("features") or []
            if not features:
                raise EventNotFound(event_id)
            data = features[0]
        if not isinstance(data, dict) or "properties" not in data:
            raise UpstreamMalformed(f"Event {event_id} response has no properties")
        logger.info("Fetched event %s", event_id)
        return data
