"""Bundled sample content."""
