"""
Classification of internal MongoDB namespaces

Internal databases and collections have unstable or permission-restricted
statistics and are never sampled.
"""

SYSTEM_DATABASES = frozenset({"admin", "config", "local"})

SYSTEM_COLLECTION_PREFIX = "system."


def is_system_db(name: str) -> bool:
    """Check whether a database is internal to the server"""
    return name in SYSTEM_DATABASES


def is_system_collection(name: str) -> bool:
    """Check whether a collection is internal to its database"""
    return name.startswith(SYSTEM_COLLECTION_PREFIX)


def collection_full_name(database: str, collection: str) -> str:
    """Return the fully-qualified "<db>.<collection>" namespace"""
    return f"{database}.{collection}"
