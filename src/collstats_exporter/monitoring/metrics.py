"""
Registry integration and exporter self-metrics
"""

import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.core import Metric
from prometheus_client.registry import Collector

from ..config.settings import settings
from ..utils.logging import get_logger
from .exporter import CollectionStatsExporter
from .sampler import CycleStats, SampleAssembler

logger = get_logger(__name__)


class MetricsCollector:
    """Owns the registry and the metrics describing the exporter itself"""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()
        self._lock = threading.Lock()

        self._init_prometheus_metrics()
        ProcessCollector(registry=self.registry)

    def _init_prometheus_metrics(self):
        """Initialize Prometheus metrics"""
        self.cycle_counter = Counter(
            'collstats_exporter_cycles_total',
            'Total number of collection stats cycles',
            registry=self.registry
        )

        self.fault_counter = Counter(
            'collstats_exporter_faults_total',
            'Total number of faults while gathering collection stats',
            ['kind'],
            registry=self.registry
        )

        self.cycle_duration = Histogram(
            'collstats_exporter_cycle_duration_seconds',
            'Time spent gathering collection stats in one cycle',
            registry=self.registry,
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
        )

        self.last_cycle_collections = Gauge(
            'collstats_exporter_last_cycle_collections',
            'Number of collections sampled in the last cycle',
            registry=self.registry
        )

        self.last_cycle_success = Gauge(
            'collstats_exporter_last_cycle_success',
            'Whether the databases could be listed in the last cycle (1 for yes)',
            registry=self.registry
        )

        # Pre-create the fault label sets so they read 0 instead of missing
        for kind in ("discovery", "database", "collection"):
            self.fault_counter.labels(kind=kind)

        self.app_info = Info(
            'collstats_exporter_app',
            'Application information',
            registry=self.registry
        )
        self.app_info.info({
            'version': settings.app_version,
            'environment': settings.environment.value
        })

    def register(self, collector: Collector):
        """Register a custom collector with the owned registry"""
        self.registry.register(collector)

    def record_cycle(self, cycle: CycleStats):
        """Record the outcome of one sampling cycle"""
        with self._lock:
            self.cycle_counter.inc()
            self.cycle_duration.observe(cycle.duration_seconds)
            self.last_cycle_success.set(0 if cycle.discovery_failed else 1)

            if cycle.discovery_failed:
                self.fault_counter.labels(kind="discovery").inc()
                return

            self.last_cycle_collections.set(cycle.collections)
            if cycle.database_faults:
                self.fault_counter.labels(kind="database").inc(cycle.database_faults)
            if cycle.collection_faults:
                self.fault_counter.labels(kind="collection").inc(cycle.collection_faults)

    def get_prometheus_metrics(self) -> str:
        """Get Prometheus metrics in text format"""
        return generate_latest(self.registry).decode('utf-8')


class CollStatsCollector(Collector):
    """
    prometheus_client collector publishing collection stats

    With collect_on_scrape every scrape runs one full cycle. Otherwise a
    background loop calls run_cycle() and scrapes emit the last published
    batch.
    """

    def __init__(
        self,
        sampler: SampleAssembler,
        exporter: CollectionStatsExporter,
        metrics: MetricsCollector | None = None,
        collect_on_scrape: bool = True,
    ):
        self.sampler = sampler
        self.exporter = exporter
        self.metrics = metrics
        self.collect_on_scrape = collect_on_scrape
        self._cycle_lock = threading.Lock()

    def describe(self) -> list[Metric]:
        families: list[Metric] = []
        self.exporter.describe(families.append)
        return families

    def collect(self) -> list[Metric]:
        families: list[Metric] = []

        if self.collect_on_scrape:
            with self._cycle_lock:
                batch = self._sample()
                self.exporter.export(batch, families.append)
        else:
            self.exporter.emit(families.append)

        return families

    def run_cycle(self):
        """Sample and publish without emitting; used by the background loop"""
        with self._cycle_lock:
            self.exporter.publish(self._sample())

    def _sample(self):
        started = time.monotonic()
        batch = self.sampler.collect()

        if self.metrics is not None:
            self.metrics.record_cycle(self.sampler.last_cycle)

        logger.debug(
            "Sampling cycle completed",
            published=batch is not None,
            duration_seconds=time.monotonic() - started,
        )
        return batch
