"""Exporters for operation results."""

from quake_intel.exporters.json_export import export_json, to_jsonable

__all__ = ["export_json", "to_jsonable"]
