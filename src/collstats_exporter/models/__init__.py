"""
Models package initialization.

Exports the typed collStats sample model and its decoder.
"""

from .stats import (
    BlockManagerStats,
    CacheStats,
    CollectionIdentity,
    CollectionSample,
    SampleBatch,
    SessionStats,
    StorageEngineStats,
    TransactionStats,
    decode_collection_stats,
)

__all__ = [
    "BlockManagerStats",
    "CacheStats",
    "CollectionIdentity",
    "CollectionSample",
    "SampleBatch",
    "SessionStats",
    "StorageEngineStats",
    "TransactionStats",
    "decode_collection_stats",
]
