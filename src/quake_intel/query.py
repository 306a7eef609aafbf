"""Query engine: overview, lookup, search, nearby, top and magnitude tiers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from quake_intel.catalog import OPERATIONS
from quake_intel.fanout import gather
from quake_intel.fetchers.usgs import FeedClient, RangeQuery, feed_id
from quake_intel.geo import distance_km
from quake_intel.models import (
    EventDetail,
    GeoPoint,
    NearbyQuake,
    NearbyResult,
    Overview,
    QuakeRecord,
    RankedQuake,
    SearchResult,
    TierResult,
    TopResult,
)
from quake_intel.normalize import normalize_detail, normalize_payload
from quake_intel.params import (
    LookupParams,
    NearbyParams,
    SearchParams,
    TierParams,
    TopParams,
    validate,
)
from quake_intel.scoring import strongest

logger = logging.getLogger(__name__)

# Magnitude floors of the tiered summary feeds, lowest first.
NEARBY_FEED_FLOORS: tuple[tuple[float, str], ...] = (
    (1.0, "1.0"),
    (2.5, "2.5"),
    (4.5, "4.5"),
)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def select_nearby_tier(min_magnitude: float) -> str:
    """Pick the first tiered feed whose floor is at or above min_magnitude.

    Falls back to the unfiltered ``all`` feed above M4.5. Completeness
    changes at the floors: M2.5 reads ``2.5`` while M2.6 reads ``4.5``, so
    quakes between the minimum and the chosen floor are not returned.
    """
    for floor, tier in NEARBY_FEED_FLOORS:
        if floor >= min_magnitude:
            return tier
    return "all"


def _rank_key(rank_by: str) -> Callable[[QuakeRecord], float]:
    if rank_by == "significance":
        return lambda q: q.significance or 0
    return lambda q: q.magnitude if q.magnitude is not None else 0.0


class QueryEngine:
    """Filtering and ranking over single feeds.

    Each public method validates its parameters before touching the feed
    client, so invalid input never reaches the network.
    """

    def __init__(
        self,
        client: FeedClient,
        max_workers: int = 4,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.client = client
        self.max_workers = max_workers
        self.clock = clock

    def overview(self) -> Overview:
        significant, recent = gather(
            [
                lambda: self.client.fetch_feed("significant_week"),
                lambda: self.client.fetch_feed("4.5_day"),
            ],
            max_workers=self.max_workers,
        )
        significant_quakes = normalize_payload(significant)
        return Overview(
            significant_quakes_this_week=significant.count,
            magnitude_45_plus_today=recent.count,
            largest_this_week=strongest(significant_quakes),
            recent_significant=tuple(significant_quakes[:3]),
            available_operations=OPERATIONS,
            fetched_at=self.clock(),
        )

    def lookup(self, event_id: str) -> EventDetail:
        params = validate(LookupParams, event_id=event_id)
        return normalize_detail(self.client.fetch_by_id(params.event_id))

    def search(
        self,
        latitude: float,
        longitude: float,
        radius_km: float = 500.0,
        min_magnitude: float = 2.5,
        max_magnitude: float | None = None,
        days_back: int = 7,
        limit: int = 20,
    ) -> SearchResult:
        """Range query around a point, oldest first, at most ``limit`` records."""
        params = validate(
            SearchParams,
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_km,
            min_magnitude=min_magnitude,
            max_magnitude=max_magnitude,
            days_back=days_back,
            limit=limit,
        )
        now = self.clock()
        payload = self.client.query_range(
            RangeQuery(
                latitude=params.latitude,
                longitude=params.longitude,
                max_radius_km=params.radius_km,
                min_magnitude=params.min_magnitude,
                max_magnitude=params.max_magnitude,
                start_time=now - timedelta(days=params.days_back),
                order_by="time-asc",
                limit=params.limit,
            )
        )
        upper = params.max_magnitude if params.max_magnitude is not None else float("inf")
        quakes = [
            q for q in normalize_payload(payload)
            if q.magnitude is not None and params.min_magnitude <= q.magnitude <= upper
        ]
        quakes.sort(key=lambda q: q.occurred_at)
        return SearchResult(
            query=params.model_dump(),
            total_found=payload.count,
            earthquakes=tuple(quakes[: params.limit]),
            fetched_at=now,
        )

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_km: float = 250.0,
        min_magnitude: float = 2.5,
        period: str = "week",
        limit: int = 20,
    ) -> NearbyResult:
        """Quakes within ``radius_km`` of a point, nearest first."""
        params = validate(
            NearbyParams,
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_km,
            min_magnitude=min_magnitude,
            period=period,
            limit=limit,
        )
        feed = feed_id(select_nearby_tier(params.min_magnitude), params.period)
        center = GeoPoint(params.latitude, params.longitude)

        within: list[NearbyQuake] = []
        for q in normalize_payload(self.client.fetch_feed(feed)):
            if q.magnitude is None or q.magnitude < params.min_magnitude:
                continue
            d = distance_km(center, q.location.point)
            if d <= params.radius_km:
                within.append(NearbyQuake(quake=q, distance_km=round(d, 1)))
        # list.sort is stable: equal distances keep feed order
        within.sort(key=lambda n: n.distance_km)
        logger.info("Nearby %s: %d quakes within %skm", feed, len(within), params.radius_km)

        return NearbyResult(
            center=center,
            radius_km=params.radius_km,
            min_magnitude=params.min_magnitude,
            feed=feed,
            total_in_radius=len(within),
            earthquakes=tuple(within[: params.limit]),
            fetched_at=self.clock(),
        )

    def top(
        self,
        period: str = "week",
        rank_by: str = "magnitude",
        min_magnitude: float = 4.5,
        limit: int = 10,
    ) -> TopResult:
        """Largest (or most significant) quakes of a period, with 1-based ranks."""
        params = validate(
            TopParams, period=period, rank_by=rank_by, min_magnitude=min_magnitude, limit=limit,
        )
        payload = self.client.fetch_feed(feed_id("all", params.period))
        filtered = [
            q for q in normalize_payload(payload)
            if q.magnitude is not None and q.magnitude >= params.min_magnitude
        ]
        # stable: ties keep feed order
        filtered.sort(key=_rank_key(params.rank_by), reverse=True)

        return TopResult(
            period=params.period,
            rank_by=params.rank_by,
            min_magnitude=params.min_magnitude,
            total_filtered=len(filtered),
            top_earthquakes=tuple(
                RankedQuake(rank=i, quake=q)
                for i, q in enumerate(filtered[: params.limit], start=1)
            ),
            fetched_at=self.clock(),
        )

    def by_magnitude_tier(
        self,
        tier: str = "4.5",
        timeframe: str = "day",
        limit: int = 20,
    ) -> TierResult:
        params = validate(TierParams, tier=tier, timeframe=timeframe, limit=limit)
        feed = feed_id(params.tier, params.timeframe)
        payload = self.client.fetch_feed(feed)
        return TierResult(
            feed=feed,
            title=payload.title,
            total_in_feed=payload.count,
            earthquakes=tuple(normalize_payload(payload)[: params.limit]),
            fetched_at=self.clock(),
        )
