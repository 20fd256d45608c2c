"""Outlinemap - heading outline editor with a live mind-map graph."""

__version__ = "0.1.0"
