"""Portfolio client: local replica and sync layer for a remote portfolio service."""

__version__ = "0.1.0"
