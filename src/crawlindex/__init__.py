"""crawlindex - concurrent file crawler feeding a full-text index."""

__version__ = "0.1.0"
