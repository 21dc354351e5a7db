"""
Unit tests for registry integration and self-metrics
"""

import os

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from collstats_exporter.monitoring.metrics import CollStatsCollector, MetricsCollector
from collstats_exporter.monitoring.sampler import CycleStats

NS = "mongodb_mongod"


@pytest.fixture
def metrics_collector() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def collector(sampler, exporter, metrics_collector) -> CollStatsCollector:
    collector = CollStatsCollector(sampler, exporter, metrics=metrics_collector)
    metrics_collector.register(collector)
    return collector


def value(metrics_collector, name, **labels):
    return metrics_collector.registry.get_sample_value(name, labels)


@pytest.mark.unit
class TestCollStatsCollector:
    """Test suite for CollStatsCollector"""

    def test_registration_does_not_sample(self, collector, mongo_source):
        assert mongo_source.stats_calls == []

    def test_describe_matches_exporter(self, collector, exporter):
        assert [f.name for f in collector.describe()] == [
            f.name for f in exporter.descriptions()
        ]

    def test_scrape_runs_a_cycle(self, collector, metrics_collector, mongo_source):
        assert value(metrics_collector, f"{NS}_db_coll_count", database="app", collection="users") == 2.0
        assert len(mongo_source.stats_calls) == 3

        text = metrics_collector.get_prometheus_metrics()
        assert f'{NS}_db_coll_index_size{{collection="users",database="app",index="byDate"}} 250.0' in text
        assert "collection_wiredtiger_cache_bytes" in text

    def test_dropped_collection_disappears_on_next_scrape(
        self, collector, metrics_collector, mongo_source
    ):
        name = f"{NS}_db_coll_count"
        assert value(metrics_collector, name, database="app", collection="orders") == 5.0

        del mongo_source.databases["app"]["orders"]

        assert value(metrics_collector, name, database="app", collection="orders") is None
        assert value(metrics_collector, name, database="app", collection="users") == 2.0

    def test_discovery_failure_emits_nothing(self, collector, metrics_collector, mongo_source):
        mongo_source.database_error = ServerSelectionTimeoutError("no servers")

        assert collector.collect() == []
        assert value(metrics_collector, "collstats_exporter_last_cycle_success") == 0.0
        assert value(metrics_collector, "collstats_exporter_faults_total", kind="discovery") >= 1.0

    def test_background_mode(self, sampler, exporter, metrics_collector, mongo_source):
        collector = CollStatsCollector(
            sampler, exporter, metrics=metrics_collector, collect_on_scrape=False
        )

        assert collector.collect() == []
        assert mongo_source.stats_calls == []

        collector.run_cycle()
        scrapes = [{f.name for f in collector.collect()} for _ in range(3)]

        assert len(mongo_source.stats_calls) == 3
        for names in scrapes:
            assert f"{NS}_db_coll_count" in names
            assert f"{NS}_collection_wiredtiger_cache_bytes" in names

    def test_background_mode_keeps_last_batch_on_discovery_failure(
        self, sampler, exporter, mongo_source
    ):
        collector = CollStatsCollector(sampler, exporter, collect_on_scrape=False)
        collector.run_cycle()

        mongo_source.database_error = ServerSelectionTimeoutError("no servers")
        collector.run_cycle()

        assert f"{NS}_db_coll_count" in {f.name for f in collector.collect()}


@pytest.mark.unit
class TestMetricsCollector:
    """Test suite for the exporter self-metrics"""

    def test_fault_kinds_start_at_zero(self, metrics_collector):
        for kind in ("discovery", "database", "collection"):
            assert value(metrics_collector, "collstats_exporter_faults_total", kind=kind) == 0.0

    def test_record_successful_cycle(self, metrics_collector):
        metrics_collector.record_cycle(
            CycleStats(collections=4, collection_faults=1, database_faults=2, duration_seconds=0.3)
        )

        assert value(metrics_collector, "collstats_exporter_cycles_total") == 1.0
        assert value(metrics_collector, "collstats_exporter_last_cycle_collections") == 4.0
        assert value(metrics_collector, "collstats_exporter_last_cycle_success") == 1.0
        assert value(metrics_collector, "collstats_exporter_faults_total", kind="collection") == 1.0
        assert value(metrics_collector, "collstats_exporter_faults_total", kind="database") == 2.0
        assert value(metrics_collector, "collstats_exporter_cycle_duration_seconds_count") == 1.0

    def test_record_failed_cycle(self, metrics_collector):
        metrics_collector.record_cycle(CycleStats(collections=4))
        metrics_collector.record_cycle(CycleStats(discovery_failed=True))

        assert value(metrics_collector, "collstats_exporter_cycles_total") == 2.0
        assert value(metrics_collector, "collstats_exporter_last_cycle_success") == 0.0
        assert value(metrics_collector, "collstats_exporter_faults_total", kind="discovery") == 1.0
        # last good count is kept
        assert value(metrics_collector, "collstats_exporter_last_cycle_collections") == 4.0

    def test_collection_faults_from_scrape(self, collector, metrics_collector, mongo_source):
        mongo_source.databases["app"]["orders"] = OperationFailure("ns not found")

        collector.collect()

        assert value(metrics_collector, "collstats_exporter_faults_total", kind="collection") == 1.0

    def test_app_info(self, metrics_collector):
        assert "collstats_exporter_app_info" in metrics_collector.get_prometheus_metrics()

    @pytest.mark.skipif(
        not os.path.exists("/proc/self/stat"), reason="process metrics need /proc"
    )
    def test_process_metrics(self, metrics_collector):
        assert value(metrics_collector, "process_cpu_seconds_total") is not None
        assert value(metrics_collector, "process_resident_memory_bytes") > 0
