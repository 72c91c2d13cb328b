"""Content extraction."""
