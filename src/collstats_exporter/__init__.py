"""
collStats exporter - per-collection MongoDB storage statistics for Prometheus

This package samples collStats for every user collection of a MongoDB
deployment and republishes the values as labeled gauges, dropping the
series of collections and indexes that no longer exist.
"""

__version__ = "1.0.0"

from .config.settings import Settings

__all__ = ["Settings"]
