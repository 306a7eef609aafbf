"""Aggregation engine: multi-region comparison, regional and location reports."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any

from quake_intel.fanout import gather
from quake_intel.fetchers.usgs import FEED_TIMEFRAMES, FeedClient, RangeQuery, feed_id
from quake_intel.geo import BoundingBox, distance_km, in_bounding_box
from quake_intel.models import (
    ActivityWindow,
    AreaActivity,
    ComparisonResult,
    FeedPayload,
    GeoPoint,
    LocationReport,
    NearbyQuake,
    QuakeRecord,
    Region,
    RegionComparison,
    RegionalReport,
    RegionRank,
    RegionStats,
)
from quake_intel.normalize import normalize_payload
from quake_intel.params import CompareParams, RegionalParams, ReportParams, validate
from quake_intel.query import utcnow
from quake_intel.scoring import (
    assess,
    average_magnitude,
    magnitudes,
    max_magnitude,
    strongest,
)

logger = logging.getLogger(__name__)

COMPARE_PERIOD_DAYS = 7
MOST_ACTIVE_AREAS = 5

# (key, radius km, lookback days, minimum magnitude) for the location report
REPORT_WINDOWS: tuple[tuple[str, float, int, float], ...] = (
    ("within_50km", 50.0, 30, 1.0),
    ("within_250km", 250.0, 30, 2.5),
    ("within_500km", 500.0, 7, 4.0),
)


def _region_data(region: Region | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(region, Region):
        return {
            "name": region.name,
            "latitude": region.center.latitude,
            "longitude": region.center.longitude,
            "radius_km": region.radius_km,
        }
    return region


def region_stats(quakes: Sequence[QuakeRecord], total: int) -> RegionStats:
    """Summary statistics for one region; all magnitudes are 0 when empty."""
    mags = magnitudes(quakes)
    return RegionStats(
        total_quakes=total,
        average_magnitude=average_magnitude(quakes),
        max_magnitude=max_magnitude(quakes),
        quakes_above_4=sum(1 for m in mags if m >= 4),
        quakes_above_5=sum(1 for m in mags if m >= 5),
    )


def area_of(place: str | None) -> str | None:
    """Trailing comma-separated component of a place string.

    ``"10 km SSW of Ridgecrest, CA"`` -> ``"CA"``. Places without a comma
    are their own area.
    """
    if not place:
        return None
    area = place.rsplit(",", 1)[-1].strip()
    return area or None


def most_active_areas(
    quakes: Iterable[QuakeRecord], limit: int = MOST_ACTIVE_AREAS,
) -> list[AreaActivity]:
    """Rank areas by quake count, descending.

    Ties keep the order in which areas were first seen while walking
    *quakes*. That tie-break is a heuristic rather than a contract.
    """
    counts: dict[str, int] = {}
    for q in quakes:
        area = area_of(q.place)
        if area is not None:
            counts[area] = counts.get(area, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [AreaActivity(area=area, count=n) for area, n in ranked[:limit]]


class AggregationEngine:
    """Operations that combine several concurrent fetches into one result."""

    def __init__(
        self,
        client: FeedClient,
        max_workers: int = 4,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.client = client
        self.max_workers = max_workers
        self.clock = clock

    def compare(
        self,
        regions: Sequence[Region | Mapping[str, Any]],
        min_magnitude: float = 2.5,
    ) -> ComparisonResult:
        """Compare the last week of activity across 2-5 regions."""
        params = validate(
            CompareParams,
            regions=[_region_data(r) for r in regions],
            min_magnitude=min_magnitude,
        )
        now = self.clock()
        start = now - timedelta(days=COMPARE_PERIOD_DAYS)

        def fetch(region: Region) -> FeedPayload:
            return self.client.query_range(
                RangeQuery(
                    latitude=region.center.latitude,
                    longitude=region.center.longitude,
                    max_radius_km=region.radius_km,
                    min_magnitude=params.min_magnitude,
                    start_time=start,
                )
            )

        targets = [
            Region(name=r.name, center=GeoPoint(r.latitude, r.longitude), radius_km=r.radius_km)
            for r in params.regions
        ]
        payloads = gather(
            [lambda region=region: fetch(region) for region in targets],
            max_workers=self.max_workers,
        )

        comparison: list[RegionComparison] = []
        for region, payload in zip(targets, payloads):
            quakes = normalize_payload(payload)
            comparison.append(
                RegionComparison(
                    region=region,
                    stats=region_stats(quakes, payload.count),
                    top_quake=strongest(quakes),
                )
            )

        ranked = sorted(comparison, key=lambda c: c.stats.total_quakes, reverse=True)
        logger.info(
            "Compared %d regions; most active: %s", len(ranked), ranked[0].region.name,
        )
        return ComparisonResult(
            period_days=COMPARE_PERIOD_DAYS,
            min_magnitude=params.min_magnitude,
            comparison=tuple(comparison),
            most_active=ranked[0].region.name,
            least_active=ranked[-1].region.name,
            by_total_quakes=tuple(
                RegionRank(region=c.region.name, count=c.stats.total_quakes) for c in ranked
            ),
            fetched_at=now,
        )

    def regional_report(
        self,
        name: str,
        lat_min: float,
        lat_max: float,
        lon_min: float,
        lon_max: float,
        tier: str = "all",
    ) -> RegionalReport:
        """Hour/day/week/month activity inside a bounding box.

        Magnitude statistics, the strongest event and the most active
        areas are computed over the month window.
        """
        params = validate(
            RegionalParams,
            name=name,
            lat_min=lat_min,
            lat_max=lat_max,
            lon_min=lon_min,
            lon_max=lon_max,
            tier=tier,
        )
        box = BoundingBox(params.lat_min, params.lat_max, params.lon_min, params.lon_max)
        feeds = [feed_id(params.tier, timeframe) for timeframe in FEED_TIMEFRAMES]
        payloads = gather(
            [lambda feed=feed: self.client.fetch_feed(feed) for feed in feeds],
            max_workers=self.max_workers,
        )

        windows: dict[str, list[QuakeRecord]] = {}
        for timeframe, payload in zip(FEED_TIMEFRAMES, payloads):
            windows[timeframe] = [
                q for q in normalize_payload(payload) if in_bounding_box(q.location.point, box)
            ]
        month = windows["month"]

        return RegionalReport(
            name=params.name,
            bounds=asdict(box),
            tier=params.tier,
            counts={timeframe: len(quakes) for timeframe, quakes in windows.items()},
            average_magnitude=average_magnitude(month),
            max_magnitude=max_magnitude(month),
            most_active_areas=tuple(most_active_areas(month)),
            strongest=strongest(month),
            fetched_at=self.clock(),
        )

    def location_report(
        self,
        latitude: float,
        longitude: float,
        location_name: str | None = None,
    ) -> LocationReport:
        """Risk assessment plus recent activity around a point."""
        params = validate(
            ReportParams, latitude=latitude, longitude=longitude, location_name=location_name,
        )
        now = self.clock()
        center = GeoPoint(params.latitude, params.longitude)

        def window_query(radius_km: float, days: int, min_mag: float) -> Callable[[], FeedPayload]:
            query = RangeQuery(
                latitude=center.latitude,
                longitude=center.longitude,
                max_radius_km=radius_km,
                min_magnitude=min_mag,
                start_time=now - timedelta(days=days),
            )
            return lambda: self.client.query_range(query)

        calls: list[Callable[[], FeedPayload]] = [
            window_query(radius, days, min_mag) for _, radius, days, min_mag in REPORT_WINDOWS
        ]
        calls.append(lambda: self.client.fetch_feed("significant_week"))
        *window_payloads, significant = gather(calls, max_workers=self.max_workers)

        activity: dict[str, ActivityWindow] = {}
        for (key, radius, days, min_mag), payload in zip(REPORT_WINDOWS, window_payloads):
            quakes = normalize_payload(payload)
            activity[key] = ActivityWindow(
                radius_km=radius,
                period_days=days,
                min_magnitude=min_mag,
                count=payload.count,
                max_magnitude=max_magnitude(quakes),
                average_magnitude=average_magnitude(quakes),
                quakes=tuple(quakes[:5]),
            )

        risk = assess(
            nearby_50km_count=activity["within_50km"].count,
            nearby_250km_count=activity["within_250km"].count,
            nearby_500km_count=activity["within_500km"].count,
            max_nearby_magnitude=activity["within_50km"].max_magnitude,
        )
        logger.info(
            "Report (%.4f, %.4f): risk %s (%d)", center.latitude, center.longitude,
            risk.level, risk.score,
        )

        nearest: NearbyQuake | None = None
        for q in normalize_payload(significant):
            d = round(distance_km(center, q.location.point), 1)
            if nearest is None or d < nearest.distance_km:
                nearest = NearbyQuake(quake=q, distance_km=d)

        return LocationReport(
            name=params.location_name or f"{center.latitude:.4f}, {center.longitude:.4f}",
            center=center,
            risk=risk,
            recent_activity=activity,
            significant_quakes_this_week=significant.count,
            nearest_significant=nearest,
            generated_at=now,
        )
