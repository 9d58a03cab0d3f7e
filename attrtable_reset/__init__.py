"""Rebuild a shapefile's attribute table with a single sequential FID column."""

__version__ = "0.1.0"
