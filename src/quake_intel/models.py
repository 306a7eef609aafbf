"""Data models for the earthquake intelligence service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

RiskLevel = Literal["low", "moderate", "elevated", "high"]


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Location:
    """Hypocentre of an event. Negative depth means above sea level."""

    latitude: float
    longitude: float
    depth_km: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class QuakeRecord:
    """A single earthquake event, mapped one-to-one from an upstream feature."""

    id: str
    magnitude: float | None
    magnitude_type: str | None
    place: str | None
    occurred_at: datetime
    updated_at: datetime | None
    location: Location
    significance: int | None = None
    felt: int | None = None
    alert: str | None = None
    tsunami: bool = False
    source_url: str | None = None


@dataclass(frozen=True)
class EventDetail:
    """Full single-event lookup: the canonical record plus detail-only fields."""

    record: QuakeRecord
    community_intensity: float | None = None
    estimated_intensity: float | None = None
    status: str | None = None
    network: str | None = None
    sources: tuple[str, ...] = ()
    detail_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeedPayload:
    """A raw upstream feed: the reported count and its features, in order."""

    count: int
    features: tuple[dict[str, Any], ...]
    title: str | None = None


@dataclass(frozen=True)
class Region:
    name: str
    center: GeoPoint
    radius_km: float


@dataclass(frozen=True)
class RiskAssessment:
    level: RiskLevel
    score: int
    factors: tuple[str, ...]


@dataclass(frozen=True)
class NearbyQuake:
    """A quake paired with its distance from the query centre."""

    quake: QuakeRecord
    distance_km: float


@dataclass(frozen=True)
class RankedQuake:
    rank: int
    quake: QuakeRecord


@dataclass(frozen=True)
class SearchResult:
    query: dict[str, Any]
    total_found: int
    earthquakes: tuple[QuakeRecord, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class NearbyResult:
    center: GeoPoint
    radius_km: float
    min_magnitude: float
    feed: str
    total_in_radius: int
    earthquakes: tuple[NearbyQuake, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class TopResult:
    period: str
    rank_by: str
    min_magnitude: float
    total_filtered: int
    top_earthquakes: tuple[RankedQuake, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class TierResult:
    feed: str
    title: str | None
    total_in_feed: int
    earthquakes: tuple[QuakeRecord, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class RegionStats:
    total_quakes: int
    average_magnitude: float
    max_magnitude: float
    quakes_above_4: int
    quakes_above_5: int


@dataclass(frozen=True)
class RegionComparison:
    region: Region
    stats: RegionStats
    top_quake: QuakeRecord | None


@dataclass(frozen=True)
class RegionRank:
    region: str
    count: int


@dataclass(frozen=True)
class ComparisonResult:
    period_days: int
    min_magnitude: float
    comparison: tuple[RegionComparison, ...]
    most_active: str
    least_active: str
    by_total_quakes: tuple[RegionRank, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class AreaActivity:
    area: str
    count: int


@dataclass(frozen=True)
class RegionalReport:
    name: str
    bounds: dict[str, float]
    tier: str
    counts: dict[str, int]
    average_magnitude: float
    max_magnitude: float
    most_active_areas: tuple[AreaActivity, ...]
    strongest: QuakeRecord | None
    fetched_at: datetime


@dataclass(frozen=True)
class ActivityWindow:
    radius_km: float
    period_days: int
    min_magnitude: float
    count: int
    max_magnitude: float
    average_magnitude: float
    quakes: tuple[QuakeRecord, ...]


@dataclass(frozen=True)
class LocationReport:
    """Risk assessment for a point.

    ``nearest_significant`` is the significant quake of the past week
    closest to ``center`` by great-circle distance, not the first one in
    the feed.
    """

    name: str
    center: GeoPoint
    risk: RiskAssessment
    recent_activity: dict[str, ActivityWindow]
    significant_quakes_this_week: int
    nearest_significant: NearbyQuake | None
    generated_at: datetime
    data_source: str = "USGS Earthquake Hazards Program"
    disclaimer: str = (
        "This is an automated analysis based on historical data. For official "
        "risk assessments, consult local geological authorities."
    )


@dataclass(frozen=True)
class OperationInfo:
    """Catalog entry for a public operation. Price is display metadata only."""

    name: str
    description: str
    price_usd: float


@dataclass(frozen=True)
class Overview:
    significant_quakes_this_week: int
    magnitude_45_plus_today: int
    largest_this_week: QuakeRecord | None
    recent_significant: tuple[QuakeRecord, ...]
    available_operations: tuple[OperationInfo, ...] = field(default_factory=tuple)
    fetched_at: datetime | None = None
    data_source: str = "USGS Earthquake Hazards Program (live)"
