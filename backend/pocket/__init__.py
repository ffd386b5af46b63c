"""Pocket - saved articles with tags and full-text search."""

__version__ = "0.1.0"
