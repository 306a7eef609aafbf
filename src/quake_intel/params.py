"""Validated parameter objects for the public operations.

Ranges here are the documented request contract. ``validate`` turns a
pydantic failure into :class:`quake_intel.errors.ValidationError` so that
callers see one error type whatever surface they come through.
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from quake_intel.errors import ValidationError

Period = Literal["day", "week", "month"]
RankBy = Literal["magnitude", "significance"]
Tier = Literal["significant", "4.5", "2.5", "1.0", "all"]
Timeframe = Literal["hour", "day", "week", "month"]

Latitude = Annotated[float, Field(ge=-90.0, le=90.0, description="Latitude in degrees.")]
Longitude = Annotated[float, Field(ge=-180.0, le=180.0, description="Longitude in degrees.")]


class _Params(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class LookupParams(_Params):
    event_id: str = Field(min_length=1, description="USGS event id, e.g. us6000s5ba.")


class SearchParams(_Params):
    latitude: Latitude
    longitude: Longitude
    radius_km: float = Field(default=500.0, ge=1.0, le=20000.0, description="Search radius in km.")
    min_magnitude: float = Field(default=2.5, ge=0.0, le=10.0)
    max_magnitude: float | None = Field(default=None, ge=0.0, le=10.0)
    days_back: int = Field(default=7, ge=1, le=30, description="Days of history to search.")
    limit: int = Field(default=20, ge=1, le=100)

    @model_validator(mode="after")
    def _magnitude_bounds_ordered(self) -> SearchParams:
        if self.max_magnitude is not None and self.max_magnitude < self.min_magnitude:
            raise ValueError("max_magnitude must not be below min_magnitude")
        return self


class NearbyParams(_Params):
    latitude: Latitude
    longitude: Longitude
    radius_km: float = Field(default=250.0, ge=1.0, le=20000.0)
    min_magnitude: float = Field(default=2.5, ge=0.0, le=10.0)
    period: Period = "week"
    limit: int = Field(default=20, ge=1, le=100)


class TopParams(_Params):
    period: Period = "week"
    rank_by: RankBy = "magnitude"
    min_magnitude: float = Field(default=4.5, ge=0.0, le=10.0)
    limit: int = Field(default=10, ge=1, le=50)


class TierParams(_Params):
    tier: Tier = "4.5"
    timeframe: Timeframe = "day"
    limit: int = Field(default=20, ge=1, le=100)


class RegionParams(_Params):
    name: str = Field(min_length=1)
    latitude: Latitude
    longitude: Longitude
    radius_km: float = Field(default=500.0, ge=10.0, le=5000.0)


class CompareParams(_Params):
    regions: list[RegionParams] = Field(min_length=2, max_length=5)
    min_magnitude: float = Field(default=2.5, ge=0.0, le=10.0)


class RegionalParams(_Params):
    name: str = Field(min_length=1)
    lat_min: Latitude
    lat_max: Latitude
    lon_min: Longitude
    lon_max: Longitude
    tier: Tier = "all"

    @model_validator(mode="after")
    def _latitudes_ordered(self) -> RegionalParams:
        # lon_min > lon_max is legal: the box crosses the antimeridian
        if self.lat_min > self.lat_max:
            raise ValueError("lat_min must not exceed lat_max")
        return self


class ReportParams(_Params):
    latitude: Latitude
    longitude: Longitude
    location_name: str | None = None


P = TypeVar("P", bound=BaseModel)


def validate(model: type[P], **data: object) -> P:
    """Build *model* from keyword data or raise ValidationError."""
    try:
        return model(**data)
    except PydanticValidationError as exc:
        fields = tuple(
            ".".join(str(part) for part in err["loc"]) or "__root__"
            for err in exc.errors()
        )
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or model.__name__}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid parameters: {messages}", fields=fields) from None
