"""Public operations and their listed prices.

Prices are metadata for whatever billing layer fronts the service; nothing
in this package charges or checks payment.
"""

from __future__ import annotations

from quake_intel.models import OperationInfo

OPERATIONS: tuple[OperationInfo, ...] = (
    OperationInfo("overview", "Recent significant seismic activity worldwide", 0.0),
    OperationInfo("lookup", "Full details for any earthquake by USGS event id", 0.001),
    OperationInfo("search", "Search by location, radius, magnitude and timeframe", 0.002),
    OperationInfo("nearby", "Quakes near a point, sorted by distance", 0.002),
    OperationInfo("top", "Top earthquakes by magnitude or significance", 0.002),
    OperationInfo("magnitude", "Raw feed for a magnitude tier and timeframe", 0.001),
    OperationInfo("compare", "Compare seismic activity across 2-5 regions", 0.003),
    OperationInfo("regional", "Activity report for a bounding box", 0.003),
    OperationInfo("report", "Full seismic risk report for any location", 0.005),
)


def get_operation(name: str) -> OperationInfo:
    for op in OPERATIONS:
        if op.name == name:
            return op
    raise KeyError(name)
