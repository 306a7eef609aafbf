"""Exception hierarchy shared by the fetchers, engines and outer surfaces.

    QuakeIntelError
    ├── ValidationError          input outside documented constraints
    └── UpstreamError
        ├── UpstreamUnavailable  feed did not answer successfully
        └── UpstreamMalformed    answer did not have the expected shape
            └── EventNotFound    single-event lookup found nothing
"""

from __future__ import annotations

from typing import Any


class QuakeIntelError(Exception):
    """Base exception for all application errors."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error_code": self.error_code, **self.details}


class ValidationError(QuakeIntelError):
    """Parameters outside their allowed ranges. Raised before any fetch."""

    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message, details={"fields": list(fields)})
        self.fields = fields


class UpstreamError(QuakeIntelError):
    status_code = 502
    error_code = "UPSTREAM_ERROR"


class UpstreamUnavailable(UpstreamError):
    """Network failure or non-success status from the feed source."""

    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, message: str, *, url: str, upstream_status: int | None = None) -> None:
        super().__init__(message, details={"url": url, "upstream_status": upstream_status})
        self.url = url
        self.upstream_status = upstream_status


class UpstreamMalformed(UpstreamError):
    """Response received but it does not match the expected GeoJSON shape."""

    error_code = "UPSTREAM_MALFORMED"


class EventNotFound(UpstreamMalformed):
    status_code = 404
    error_code = "EVENT_NOT_FOUND"

    def __init__(self, event_id: str) -> None:
        super().__init__(f"No event with id {event_id!r}", details={"event_id": event_id})
        self.event_id = event_id
