"""
Assembly of one cycle's collection samples
"""

import time
from dataclasses import dataclass
from typing import Any, Protocol

from ..errors import CollectionFault, DiscoveryFault
from ..models.stats import (
    CollectionIdentity,
    CollectionSample,
    SampleBatch,
    decode_collection_stats,
)
from ..utils.logging import get_logger
from .discovery import CollectionDiscovery
from .suppression import LogSuppressor

logger = get_logger(__name__)


class StatsSource(Protocol):
    """collStats capability of the database connection"""

    def run_stats_command(
        self, database: str, collection: str, scale: int = 1
    ) -> dict[str, Any]: ...


@dataclass
class CycleStats:
    """Outcome of the most recent cycle"""

    collections: int = 0
    collection_faults: int = 0
    database_faults: int = 0
    discovery_failed: bool = False
    duration_seconds: float = 0.0


class SampleAssembler:
    """Runs discovery and one collStats per collection, sequentially"""

    def __init__(
        self,
        source: StatsSource,
        discovery: CollectionDiscovery,
        suppressor: LogSuppressor,
        scale: int = 1,
    ):
        self.source = source
        self.discovery = discovery
        self.suppressor = suppressor
        self.scale = scale
        self.last_cycle = CycleStats()

    def collect(self) -> SampleBatch | None:
        """
        Build the sample batch for one cycle

        Collections whose stats cannot be fetched or decoded are left out
        and the cycle continues.

        Returns:
            SampleBatch | None: Samples in discovery order, or None when the
            databases could not be listed and nothing should be published
        """
        started = time.monotonic()
        cycle = CycleStats()

        try:
            identities = self.discovery.list_collections()
        except DiscoveryFault:
            cycle.discovery_failed = True
            cycle.duration_seconds = time.monotonic() - started
            self.last_cycle = cycle
            return None

        cycle.database_faults = self.discovery.database_faults

        batch: SampleBatch = []
        for identity in identities:
            try:
                batch.append(self._sample(identity))
            except CollectionFault as e:
                cycle.collection_faults += 1
                self.suppressor.warn(
                    e.full_name,
                    f"{e}. Collection stats will not be collected for this collection",
                    database=identity.database,
                    collection=identity.collection,
                )
            else:
                self.suppressor.resolve(identity.full_name)

        cycle.collections = len(batch)
        cycle.duration_seconds = time.monotonic() - started
        self.last_cycle = cycle

        logger.debug(
            "Collection stats cycle finished",
            collections=cycle.collections,
            collection_faults=cycle.collection_faults,
            duration_seconds=cycle.duration_seconds,
        )
        return batch

    def _sample(self, identity: CollectionIdentity) -> CollectionSample:
        try:
            raw = self.source.run_stats_command(
                identity.database, identity.collection, self.scale
            )
        except Exception as e:
            raise CollectionFault(identity.full_name, str(e)) from e

        return decode_collection_stats(raw, identity.database, identity.collection)
