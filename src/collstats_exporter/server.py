"""
Process entrypoint for the collStats exporter
"""

import asyncio
import signal

from prometheus_client import start_http_server

from .config.settings import Settings, settings as default_settings
from .monitoring.discovery import CollectionDiscovery
from .monitoring.exporter import CollectionStatsExporter
from .monitoring.metrics import CollStatsCollector, MetricsCollector
from .monitoring.sampler import SampleAssembler
from .monitoring.suppression import LogSuppressor
from .storage.database import DatabaseManager
from .utils.async_utils import run_in_thread, run_periodically, shutdown_thread_pool
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class CollStatsExporterServer:
    """Wires the sampling pipeline to a registry and serves it over HTTP

    Attributes (None until initialize() runs, replaceable by tests):
        db_manager
        metrics_collector
        collector
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        self.db_manager: DatabaseManager | None = None
        self.metrics_collector: MetricsCollector | None = None
        self.collector: CollStatsCollector | None = None
        self._http_server = None
        self._stop_event = asyncio.Event()

    def build_collector(self, db_manager: DatabaseManager) -> CollStatsCollector:
        """Assemble the pipeline over a database capability"""
        suppressor = LogSuppressor(get_logger("collstats_exporter.faults"))
        discovery = CollectionDiscovery(db_manager, suppressor)
        sampler = SampleAssembler(
            db_manager, discovery, suppressor, scale=self.settings.mongo.stats_scale
        )
        exporter = CollectionStatsExporter(self.settings.monitoring.metric_namespace)

        return CollStatsCollector(
            sampler,
            exporter,
            metrics=self.metrics_collector,
            collect_on_scrape=self.settings.monitoring.collect_on_scrape,
        )

    async def initialize(self):
        """Create the client, check it, register the collector and start the HTTP endpoint"""
        if self.db_manager is None:
            self.db_manager = DatabaseManager(self.settings.mongo)
            await run_in_thread(self.db_manager.initialize)

        if await run_in_thread(self.db_manager.health_check):
            logger.info("MongoDB reachable")
        else:
            # Scrapes keep working and report the outage through the fault metrics
            logger.warning("MongoDB not reachable at startup")

        if self.metrics_collector is None:
            self.metrics_collector = MetricsCollector()

        if self.collector is None:
            self.collector = self.build_collector(self.db_manager)
            self.metrics_collector.register(self.collector)

        monitoring = self.settings.monitoring
        self._http_server = start_http_server(
            monitoring.prometheus_port,
            addr=monitoring.listen_address,
            registry=self.metrics_collector.registry,
        )
        logger.info(
            "Metrics endpoint listening",
            address=monitoring.listen_address,
            port=monitoring.prometheus_port,
            collect_on_scrape=monitoring.collect_on_scrape,
        )

    async def run(self):
        """Serve until stop() is called"""
        monitoring = self.settings.monitoring

        if monitoring.collect_on_scrape:
            await self._stop_event.wait()
        else:
            await run_periodically(
                self.collector.run_cycle,
                monitoring.collection_interval,
                self._stop_event,
            )

    def stop(self):
        self._stop_event.set()

    async def cleanup(self):
        """Stop serving and release the client and the thread pool"""
        if self._http_server is not None:
            server, _thread = self._http_server
            server.shutdown()
            server.server_close()
            self._http_server = None

        if self.db_manager is not None:
            await run_in_thread(self.db_manager.cleanup)

        await shutdown_thread_pool()
        logger.info("Exporter stopped")


async def main():
    """Main server entry point"""
    setup_logging(default_settings)
    logger.info(
        "Starting collStats exporter",
        version=default_settings.app_version,
        environment=default_settings.environment.value,
    )

    server = CollStatsExporterServer(default_settings)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, server.stop)

    try:
        await server.initialize()
        await server.run()
    finally:
        await server.cleanup()


def run():
    """Console script entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    run()
