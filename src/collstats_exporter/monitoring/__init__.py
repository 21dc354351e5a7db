"""
Monitoring package initialization.

Exports:
- CollStatsCollector: prometheus_client collector running the sampling pipeline.
- CollectionStatsExporter: Builds and emits the labeled gauge families.
- MetricsCollector: Registry owner and exporter self-metrics.
- SampleAssembler, CollectionDiscovery, LogSuppressor: pipeline stages.
"""

from .discovery import CollectionDiscovery
from .exporter import CollectionStatsExporter
from .metrics import CollStatsCollector, MetricsCollector
from .sampler import CycleStats, SampleAssembler
from .suppression import LogSuppressor

__all__ = [
    "CollStatsCollector",
    "CollectionDiscovery",
    "CollectionStatsExporter",
    "CycleStats",
    "LogSuppressor",
    "MetricsCollector",
    "SampleAssembler",
]
