"""HTTP API: free market-data routes and gated premium routes."""

from btcsignal.api.app import create_app

__all__ = ["create_app"]
