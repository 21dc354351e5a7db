"""
Storage package initialization.

Exports:
- DatabaseManager: MongoDB client wrapper issuing the listing and collStats commands.
- Namespace classification helpers for internal databases and collections.
"""

from .database import DatabaseManager
from .namespaces import collection_full_name, is_system_collection, is_system_db

__all__ = [
    "DatabaseManager",
    "collection_full_name",
    "is_system_collection",
    "is_system_db",
]
