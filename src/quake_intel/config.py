"""Configuration model for the earthquake intelligence service."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

USGS_FEED_BASE_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"
USGS_QUERY_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"


class QuakeIntelConfig(BaseSettings):
    """Transport settings handed to the feed client at construction.

    Values can be set via constructor arguments, environment variables
    prefixed with QUAKE_INTEL_, or defaults.
    """

    model_config = {"env_prefix": "QUAKE_INTEL_"}

    feed_base_url: str = Field(
        default=USGS_FEED_BASE_URL, description="Base URL of the summary GeoJSON feeds."
    )
    query_url: str = Field(
        default=USGS_QUERY_URL, description="FDSN event query endpoint."
    )
    request_timeout: float = Field(
        default=30.0, ge=1.0, le=300.0, description="Per-fetch HTTP timeout in seconds."
    )
    max_concurrency: int = Field(
        default=4, ge=1, le=16, description="Upper bound on concurrent fetches per request."
    )
    user_agent: str = Field(
        default="quake-intel", description="User-Agent header sent upstream."
    )
