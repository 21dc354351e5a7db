"""
Test configuration and fixtures for the collStats exporter
"""

# Standard library imports
from typing import Any
from unittest.mock import MagicMock

# Third-party imports
import pytest
from prometheus_client.core import Metric

# Local imports
from collstats_exporter.config.settings import Settings
from collstats_exporter.monitoring.discovery import CollectionDiscovery
from collstats_exporter.monitoring.exporter import CollectionStatsExporter
from collstats_exporter.monitoring.sampler import SampleAssembler
from collstats_exporter.monitoring.suppression import LogSuppressor


class FakeMongoSource:
    """In-memory stand-in for DatabaseManager

    databases maps a database name to {collection name: collStats response}.
    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self, databases: dict[str, Any] | None = None):
        self.databases = databases or {}
        self.database_error: Exception | None = None
        self.collection_errors: dict[str, Exception] = {}
        self.stats_calls: list[tuple[str, str, int]] = []
        self.reachable = True
        self.health_checks = 0

    def list_database_names(self) -> list[str]:
        if self.database_error is not None:
            raise self.database_error
        return list(self.databases)

    def list_collection_names(self, database: str) -> list[str]:
        if database in self.collection_errors:
            raise self.collection_errors[database]
        return list(self.databases[database])

    def run_stats_command(self, database: str, collection: str, scale: int = 1):
        self.stats_calls.append((database, collection, scale))
        response = self.databases[database][collection]
        if isinstance(response, Exception):
            raise response
        return response

    def health_check(self) -> bool:
        self.health_checks += 1
        return self.reachable


def collstats_response(
    count: int = 10,
    size: int = 4096,
    avg_obj_size: int | None = 409,
    storage_size: int = 8192,
    index_sizes: dict[str, int] | None = None,
    wired_tiger: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a collStats response shaped like the server's"""
    index_sizes = {"_id_": 4096} if index_sizes is None else index_sizes
    response = {
        "ns": "app.users",
        "count": count,
        "size": size,
        "storageSize": storage_size,
        "totalIndexSize": sum(index_sizes.values()),
        "indexSizes": index_sizes,
        "nindexes": len(index_sizes),
        "ok": 1.0,
    }
    if avg_obj_size is not None:
        response["avgObjSize"] = avg_obj_size
    if wired_tiger is not None:
        response["wiredTiger"] = wired_tiger
    return response


WIRED_TIGER_STATS = {
    "metadata": {"formatVersion": 1},
    "block-manager": {
        "blocks freed": 12,
        "blocks allocated": 40,
        "file size in bytes": 20480,
    },
    "cache": {
        "bytes currently in the cache": 1500,
        "tracked dirty bytes in the cache": 200,
        "bytes read into cache": 3000,
        "bytes written from cache": 2500,
        "unmodified pages evicted": 7,
        "modified pages evicted": 3,
        "pages read into cache": 11,
        "pages written from cache": 9,
    },
    "transaction": {"update conflicts": 2},
    "session": {"open cursor count": 4},
}


def sample_values(families: list[Metric]) -> dict[tuple, float]:
    """Flatten metric families into {(name, sorted label items): value}"""
    values = {}
    for family in families:
        for sample in family.samples:
            values[(sample.name, tuple(sorted(sample.labels.items())))] = sample.value
    return values


def labels(**kwargs) -> tuple:
    return tuple(sorted(kwargs.items()))


@pytest.fixture
def test_settings() -> Settings:
    """Test settings configuration"""
    return Settings(
        environment="testing",
        log_level="DEBUG",
        mongo={"uri": "mongodb://localhost:27017", "server_selection_timeout_ms": 100},
        monitoring={"prometheus_port": 9999, "collect_on_scrape": True},
    )


@pytest.fixture
def fault_logger() -> MagicMock:
    """Logger double receiving the suppressed warnings"""
    return MagicMock()


@pytest.fixture
def suppressor(fault_logger) -> LogSuppressor:
    return LogSuppressor(fault_logger)


@pytest.fixture
def mongo_source() -> FakeMongoSource:
    """Deployment with internal namespaces and two user databases"""
    return FakeMongoSource({
        "admin": {"system.users": collstats_response()},
        "config": {"chunks": collstats_response()},
        "local": {"oplog.rs": collstats_response()},
        "app": {
            "system.views": collstats_response(),
            "users": collstats_response(
                count=2,
                index_sizes={"_id_": 100, "byDate": 250},
                wired_tiger=WIRED_TIGER_STATS,
            ),
            "orders": collstats_response(count=5),
        },
        "billing": {"invoices": collstats_response(count=7, avg_obj_size=None)},
    })


@pytest.fixture
def discovery(mongo_source, suppressor) -> CollectionDiscovery:
    return CollectionDiscovery(mongo_source, suppressor)


@pytest.fixture
def sampler(mongo_source, discovery, suppressor) -> SampleAssembler:
    return SampleAssembler(mongo_source, discovery, suppressor)


@pytest.fixture
def exporter() -> CollectionStatsExporter:
    return CollectionStatsExporter(namespace="mongodb_mongod")


# Markers for different test categories
def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
