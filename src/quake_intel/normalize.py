"""Map raw USGS GeoJSON features onto the canonical QuakeRecord shape.

USGS orders ``geometry.coordinates`` as ``[longitude, latitude, depth]``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from quake_intel.errors import UpstreamMalformed
from quake_intel.models import EventDetail, FeedPayload, Location, QuakeRecord


def _epoch_ms(value: Any, name: str, feature_id: str) -> datetime:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UpstreamMalformed(f"Feature {feature_id}: {name} is not an epoch timestamp")
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _optional_float(value: Any, name: str, feature_id: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise UpstreamMalformed(f"Feature {feature_id}: {name} is not numeric") from None


def _optional_int(value: Any, name: str, feature_id: str) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise UpstreamMalformed(f"Feature {feature_id}: {name} is not an integer") from None


def _location(feature: dict[str, Any], feature_id: str) -> Location:
    geometry = feature.get("geometry")
    if not isinstance(geometry, dict):
        raise UpstreamMalformed(f"Feature {feature_id} has no geometry")
    coords = geometry.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 3:
        raise UpstreamMalformed(f"Feature {feature_id} has incomplete coordinates")
    if any(c is None for c in coords[:3]):
        raise UpstreamMalformed(f"Feature {feature_id} has null coordinates")
    try:
        lon, lat, depth = (float(c) for c in coords[:3])
    except (TypeError, ValueError):
        raise UpstreamMalformed(f"Feature {feature_id} has non-numeric coordinates") from None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise UpstreamMalformed(
            f"Feature {feature_id} coordinates out of range (lon={lon}, lat={lat})"
        )
    return Location(latitude=lat, longitude=lon, depth_km=depth)


def normalize(feature: dict[str, Any]) -> QuakeRecord:
    """Rename one feed feature into a QuakeRecord. Performs no filtering."""
    if not isinstance(feature, dict):
        raise UpstreamMalformed("Feature is not an object")
    feature_id = feature.get("id")
    if not isinstance(feature_id, str) or not feature_id:
        raise UpstreamMalformed("Feature has no usable id")
    props = feature.get("properties")
    if not isinstance(props, dict):
        raise UpstreamMalformed(f"Feature {feature_id} has no properties")
    if props.get("time") is None:
        raise UpstreamMalformed(f"Feature {feature_id} has no origin time")

    updated = props.get("updated")
    return QuakeRecord(
        id=feature_id,
        magnitude=_optional_float(props.get("mag"), "mag", feature_id),
        magnitude_type=props.get("magType"),
        place=props.get("place"),
        occurred_at=_epoch_ms(props["time"], "time", feature_id),
        updated_at=_epoch_ms(updated, "updated", feature_id) if updated is not None else None,
        location=_location(feature, feature_id),
        significance=_optional_int(props.get("sig"), "sig", feature_id),
        felt=_optional_int(props.get("felt"), "felt", feature_id),
        alert=props.get("alert"),
        tsunami=props.get("tsunami") == 1,
        source_url=props.get("url"),
    )


def normalize_payload(payload: FeedPayload) -> list[QuakeRecord]:
    """Normalize every feature of a feed, preserving upstream order."""
    return [normalize(feature) for feature in payload.features]


def _csv_tokens(value: Any) -> tuple[str, ...]:
    # USGS wraps these lists in leading/trailing commas: ",us,at,pt,"
    if not value:
        return ()
    return tuple(token for token in str(value).split(",") if token)


def normalize_detail(feature: dict[str, Any]) -> EventDetail:
    """Normalize a single-event lookup response, keeping detail-only fields."""
    record = normalize(feature)
    props = feature["properties"]
    return EventDetail(
        record=record,
        community_intensity=_optional_float(props.get("cdi"), "cdi", record.id),
        estimated_intensity=_optional_float(props.get("mmi"), "mmi", record.id),
        status=props.get("status"),
        network=props.get("net"),
        sources=_csv_tokens(props.get("sources")),
        detail_types=_csv_tokens(props.get("types")),
    )
