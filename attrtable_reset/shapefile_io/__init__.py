"""Thin wrappers over pyshp for the geometry and attribute files."""
