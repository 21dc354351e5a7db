"""
Discovery of the collections to sample
"""

from typing import Protocol

from ..errors import DatabaseFault, DiscoveryFault
from ..models.stats import CollectionIdentity
from ..storage.namespaces import is_system_collection, is_system_db
from ..utils.logging import get_logger
from .suppression import DISCOVERY_KEY, LogSuppressor

logger = get_logger(__name__)


class NamespaceSource(Protocol):
    """Listing capability of the database connection"""

    def list_database_names(self) -> list[str]: ...

    def list_collection_names(self, database: str) -> list[str]: ...


class CollectionDiscovery:
    """Enumerates user collections, skipping internal databases and collections"""

    def __init__(self, source: NamespaceSource, suppressor: LogSuppressor):
        self.source = source
        self.suppressor = suppressor
        self.database_faults = 0

    def list_collections(self) -> list[CollectionIdentity]:
        """
        List every non-internal collection of every non-internal database

        A database whose collections cannot be listed is skipped for this
        call; the others are still listed.

        Returns:
            list[CollectionIdentity]: Identities in the order the server lists them

        Raises:
            DiscoveryFault: If the database names cannot be listed
        """
        self.database_faults = 0

        try:
            database_names = self.source.list_database_names()
        except Exception as e:
            self.suppressor.warn(
                DISCOVERY_KEY,
                f"{e}. Collection stats will not be collected",
                error_type=type(e).__name__,
            )
            raise DiscoveryFault(str(e)) from e

        self.suppressor.resolve(DISCOVERY_KEY)

        identities = []
        for database in database_names:
            if is_system_db(database):
                continue

            try:
                identities.extend(self._list_database(database))
            except DatabaseFault as e:
                self.database_faults += 1
                self.suppressor.warn(
                    database,
                    f"{e}. Collection stats will not be collected for this db",
                    database=database,
                )

        logger.debug(
            "Collections discovered",
            collections=len(identities),
            skipped_databases=self.database_faults,
        )
        return identities

    def _list_database(self, database: str) -> list[CollectionIdentity]:
        try:
            collection_names = self.source.list_collection_names(database)
        except Exception as e:
            raise DatabaseFault(database, str(e)) from e

        self.suppressor.resolve(database)

        return [
            CollectionIdentity(database, name)
            for name in collection_names
            if not is_system_collection(name)
        ]
