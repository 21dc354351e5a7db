"""
Export of collection samples as labeled Prometheus gauges

Every export rebuilds all metric families from the batch it is given and
swaps them in as one snapshot. Nothing from an earlier batch survives the
swap, so a dropped collection or index stops being reported on the next
successful export instead of repeating its last value forever.

WiredTiger families live in the same snapshot as the collection-level
ones: a sub-report the server did not return has no series until a later
batch carries it again.
"""

import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from prometheus_client.core import GaugeMetricFamily, Metric

from ..models.stats import (
    BlockManagerStats,
    CacheStats,
    CollectionSample,
    SampleBatch,
    SessionStats,
    StorageEngineStats,
    TransactionStats,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

Sink = Callable[[Metric], None]

COLLECTION_LABELS = ("database", "collection")
INDEX_LABELS = (*COLLECTION_LABELS, "index")
TYPE_LABELS = (*COLLECTION_LABELS, "type")


@dataclass(frozen=True)
class SeriesDefinition:
    """Name, help text and label keys of one gauge"""

    key: str
    subsystem: str
    name: str
    documentation: str
    labels: tuple[str, ...]

    def metric_name(self, namespace: str) -> str:
        return f"{namespace}_{self.subsystem}_{self.name}"

    def family(self, namespace: str) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            self.metric_name(namespace), self.documentation, labels=list(self.labels)
        )


COLLECTION_SERIES = (
    SeriesDefinition(
        "size", "db_coll", "size",
        "The total size in memory of all records in a collection",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "count", "db_coll", "count",
        "The number of objects or documents in this collection",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "avg_obj_size", "db_coll", "avgobjsize",
        "The average size of an object in the collection (plus any padding)",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "storage_size", "db_coll", "storage_size",
        "The total amount of storage allocated to this collection for document storage",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "indexes", "db_coll", "indexes",
        "The number of indexes on the collection",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "total_index_size", "db_coll", "indexes_size",
        "The total size of all indexes",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "index_size", "db_coll", "index_size",
        "The individual index size",
        INDEX_LABELS,
    ),
)

STORAGE_ENGINE_SERIES = (
    SeriesDefinition(
        "blocks_total", "collection_wiredtiger_blockmanager", "blocks_total",
        "The total number of blocks allocated by the WiredTiger BlockManager",
        TYPE_LABELS,
    ),
    SeriesDefinition(
        "cache_pages_total", "collection_wiredtiger_cache", "pages_total",
        "The total number of pages read into/from the WiredTiger Cache",
        TYPE_LABELS,
    ),
    SeriesDefinition(
        "cache_bytes_total", "collection_wiredtiger_cache", "bytes_total",
        "The total number of bytes read into/from the WiredTiger Cache",
        TYPE_LABELS,
    ),
    SeriesDefinition(
        "cache_evicted_total", "collection_wiredtiger_cache", "evicted_total",
        "The total number of pages evicted from the WiredTiger Cache",
        TYPE_LABELS,
    ),
    SeriesDefinition(
        "cache_bytes", "collection_wiredtiger_cache", "bytes",
        "The current size of data in the WiredTiger Cache in bytes",
        TYPE_LABELS,
    ),
    SeriesDefinition(
        "update_conflicts", "collection_wiredtiger_transactions", "update_conflicts",
        "The number of conflicts updating transactions",
        COLLECTION_LABELS,
    ),
    SeriesDefinition(
        "open_cursors", "collection_wiredtiger_session", "open_cursors_total",
        "The total number of cursors opened in WiredTiger",
        COLLECTION_LABELS,
    ),
)

# Collection-level series fed directly from a sample attribute
_SCALAR_FIELDS = (
    ("size", "size"),
    ("count", "count"),
    ("avg_obj_size", "avg_obj_size"),
    ("storage_size", "storage_size"),
    ("total_index_size", "total_index_size"),
)

# (series key, type label or None, value)
EngineValue = tuple[str, str | None, float | None]


def block_manager_values(stats: BlockManagerStats) -> Iterator[EngineValue]:
    yield "blocks_total", "freed", stats.blocks_freed
    yield "blocks_total", "allocated", stats.blocks_allocated


def cache_values(stats: CacheStats) -> Iterator[EngineValue]:
    yield "cache_pages_total", "read", stats.pages_read_into
    yield "cache_pages_total", "written", stats.pages_written_from
    yield "cache_bytes_total", "read", stats.bytes_read_into
    yield "cache_bytes_total", "written", stats.bytes_written_from
    yield "cache_evicted_total", "modified", stats.evicted_modified
    yield "cache_evicted_total", "unmodified", stats.evicted_unmodified
    yield "cache_bytes", "total", stats.bytes_total
    yield "cache_bytes", "dirty", stats.bytes_dirty


def transaction_values(stats: TransactionStats) -> Iterator[EngineValue]:
    yield "update_conflicts", None, stats.update_conflicts


def session_values(stats: SessionStats) -> Iterator[EngineValue]:
    yield "open_cursors", None, stats.open_cursors


def storage_engine_values(stats: StorageEngineStats) -> Iterator[EngineValue]:
    """Values of every sub-report the server returned"""
    if stats.block_manager is not None:
        yield from block_manager_values(stats.block_manager)
    if stats.cache is not None:
        yield from cache_values(stats.cache)
    if stats.transaction is not None:
        yield from transaction_values(stats.transaction)
    if stats.session is not None:
        yield from session_values(stats.session)


class CollectionStatsExporter:
    """Turns sample batches into gauge families and hands them to a sink"""

    def __init__(self, namespace: str = "mongodb_mongod"):
        self.namespace = namespace
        self._lock = threading.Lock()
        self._collection_families: list[Metric] = []
        self._engine_families: list[Metric] = []

    def descriptions(self) -> list[Metric]:
        """One empty family per series this exporter can produce"""
        return [
            series.family(self.namespace)
            for series in (*COLLECTION_SERIES, *STORAGE_ENGINE_SERIES)
        ]

    def describe(self, sink: Sink):
        """Declare every series definition; safe to call any number of times"""
        for family in self.descriptions():
            sink(family)

    def export(self, batch: SampleBatch | None, sink: Sink):
        """
        Publish a batch and emit it

        Args:
            batch: Samples of the current cycle; None when discovery failed,
                in which case nothing is changed or emitted
            sink: Receives each non-empty metric family
        """
        if batch is None:
            logger.debug("No sample batch this cycle, series left unchanged")
            return

        collection_families, engine_families = self._build_families(batch)
        with self._lock:
            self._swap(collection_families, engine_families)
            self._emit(sink)

    def publish(self, batch: SampleBatch | None):
        """Replace the current snapshot with one built from the batch"""
        if batch is None:
            logger.debug("No sample batch this cycle, series left unchanged")
            return

        collection_families, engine_families = self._build_families(batch)
        with self._lock:
            self._swap(collection_families, engine_families)

    def emit(self, sink: Sink):
        """Hand the current snapshot to the sink"""
        with self._lock:
            self._emit(sink)

    def _swap(self, collection_families: list[Metric], engine_families: list[Metric]):
        self._collection_families = collection_families
        self._engine_families = engine_families

    def _emit(self, sink: Sink):
        for family in self._collection_families:
            sink(family)
        for family in self._engine_families:
            sink(family)

    def _build_families(
        self, batch: SampleBatch
    ) -> tuple[list[Metric], list[Metric]]:
        collection = {s.key: s.family(self.namespace) for s in COLLECTION_SERIES}
        engine = {s.key: s.family(self.namespace) for s in STORAGE_ENGINE_SERIES}

        for sample in batch:
            self._add_collection_values(collection, sample)
            if sample.wired_tiger is not None:
                self._add_engine_values(engine, sample)

        return (
            [family for family in collection.values() if family.samples],
            [family for family in engine.values() if family.samples],
        )

    @staticmethod
    def _add_collection_values(
        families: dict[str, GaugeMetricFamily], sample: CollectionSample
    ):
        labels = [sample.database, sample.collection]

        for key, attribute in _SCALAR_FIELDS:
            value = getattr(sample, attribute)
            if value is not None:
                families[key].add_metric(labels, float(value))

        families["indexes"].add_metric(labels, float(sample.index_count))
        for index, size in sample.index_sizes.items():
            families["index_size"].add_metric([*labels, index], float(size))

    @staticmethod
    def _add_engine_values(
        families: dict[str, GaugeMetricFamily], sample: CollectionSample
    ):
        labels = [sample.database, sample.collection]

        for key, kind, value in storage_engine_values(sample.wired_tiger):
            if value is None:
                continue
            label_values = labels if kind is None else [*labels, kind]
            families[key].add_metric(label_values, float(value))
