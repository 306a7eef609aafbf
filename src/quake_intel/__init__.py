"""Earthquake intelligence built on the USGS real-time feeds."""

__version__ = "1.0.0"
