"""Upstream feed fetchers."""

from quake_intel.fetchers.usgs import FeedClient, RangeQuery

__all__ = ["FeedClient", "RangeQuery"]
