"""Core pipeline for Glyphwerk icon fonts."""
