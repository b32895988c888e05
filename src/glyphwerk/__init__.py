"""Glyphwerk turns a directory of SVG icons into an icon webfont."""

__version__ = "0.1.0"
