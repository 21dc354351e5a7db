"""
Database manager for the collStats exporter
"""

from typing import Any

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from ..config.settings import MongoSettings, settings as default_settings
from ..utils.logging import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    """Manages the MongoDB client and the read-only commands the exporter issues"""

    def __init__(self, mongo_settings: MongoSettings | None = None):
        self.settings = mongo_settings or default_settings.mongo
        self.client: MongoClient | None = None
        self._initialized = False

    def initialize(self):
        """Create the MongoDB client

        The driver connects lazily; a wrong URI surfaces on the first command,
        not here.
        """
        if self._initialized:
            return

        try:
            logger.info("Initializing MongoDB client", app_name=self.settings.app_name)

            self.client = MongoClient(
                self.settings.uri,
                appname=self.settings.app_name,
                directConnection=self.settings.direct_connection,
                serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
                connectTimeoutMS=self.settings.connect_timeout_ms,
                socketTimeoutMS=self.settings.socket_timeout_ms,
            )

            self._initialized = True
            logger.info("MongoDB client initialized successfully")

        except PyMongoError as e:
            logger.error("Failed to initialize MongoDB client", error=str(e))
            raise

    def cleanup(self):
        """Close the MongoDB client"""
        if self.client is not None:
            self.client.close()
            self.client = None
            self._initialized = False
            logger.info("MongoDB connections closed")

    def _get_client(self) -> MongoClient:
        if not self._initialized:
            self.initialize()
        return self.client

    def list_database_names(self) -> list[str]:
        """List the names of all databases visible to the configured user"""
        return self._get_client().list_database_names()

    def list_collection_names(self, database: str) -> list[str]:
        """List the collection names of one database"""
        return self._get_client()[database].list_collection_names()

    def run_stats_command(
        self, database: str, collection: str, scale: int = 1
    ) -> dict[str, Any]:
        """Run collStats for one collection and return the raw response"""
        return self._get_client()[database].command(
            {"collStats": collection, "scale": scale}
        )

    def health_check(self) -> bool:
        """Check database connectivity"""
        try:
            self._get_client().admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error("Database health check failed", error=str(e))
            return False
