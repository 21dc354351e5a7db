"""
Typed model of a collStats response

Field aliases are the keys the server returns. Every scalar is optional:
which keys are present depends on the storage engine and server version,
and a missing key must stay missing rather than become zero.
"""

from collections.abc import Mapping
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, ValidationError, validator

from ..errors import DecodeFault
from ..storage.namespaces import collection_full_name


class CollectionIdentity(NamedTuple):
    """A monitored collection within one cycle"""

    database: str
    collection: str

    @property
    def full_name(self) -> str:
        return collection_full_name(self.database, self.collection)


class _StatsModel(BaseModel):
    class Config:
        populate_by_name = True
        extra = "ignore"


class BlockManagerStats(_StatsModel):
    """WiredTiger block manager counters"""

    blocks_freed: float | None = Field(None, alias="blocks freed")
    blocks_allocated: float | None = Field(None, alias="blocks allocated")


class CacheStats(_StatsModel):
    """WiredTiger cache counters for one collection"""

    bytes_total: float | None = Field(None, alias="bytes currently in the cache")
    bytes_dirty: float | None = Field(None, alias="tracked dirty bytes in the cache")
    bytes_read_into: float | None = Field(None, alias="bytes read into cache")
    bytes_written_from: float | None = Field(None, alias="bytes written from cache")
    evicted_unmodified: float | None = Field(None, alias="unmodified pages evicted")
    evicted_modified: float | None = Field(None, alias="modified pages evicted")
    pages_read_into: float | None = Field(None, alias="pages read into cache")
    pages_written_from: float | None = Field(None, alias="pages written from cache")


class TransactionStats(_StatsModel):
    """WiredTiger transaction counters"""

    update_conflicts: float | None = Field(None, alias="update conflicts")


class SessionStats(_StatsModel):
    """WiredTiger session counters"""

    open_cursors: float | None = Field(None, alias="open cursor count")


class StorageEngineStats(_StatsModel):
    """The wiredTiger sub-document; each sub-report is independently optional"""

    block_manager: BlockManagerStats | None = Field(None, alias="block-manager")
    cache: CacheStats | None = Field(None, alias="cache")
    transaction: TransactionStats | None = Field(None, alias="transaction")
    session: SessionStats | None = Field(None, alias="session")


class CollectionSample(_StatsModel):
    """One collection's statistics for one cycle"""

    database: str
    collection: str

    count: float | None = Field(None, alias="count")
    size: float | None = Field(None, alias="size")
    avg_obj_size: float | None = Field(None, alias="avgObjSize")
    storage_size: float | None = Field(None, alias="storageSize")
    total_index_size: float | None = Field(None, alias="totalIndexSize")
    index_sizes: dict[str, float] = Field(default_factory=dict, alias="indexSizes")
    wired_tiger: StorageEngineStats | None = Field(None, alias="wiredTiger")

    @validator("index_sizes", pre=True)
    def default_index_sizes(cls, v):
        return {} if v is None else v

    @property
    def full_name(self) -> str:
        return collection_full_name(self.database, self.collection)

    @property
    def index_count(self) -> int:
        return len(self.index_sizes)


SampleBatch = list[CollectionSample]


def decode_collection_stats(
    raw: Any, database: str, collection: str
) -> CollectionSample:
    """
    Decode a raw collStats response

    Args:
        raw: Response document as returned by the driver
        database: Database the command was run against
        collection: Collection the stats describe

    Returns:
        CollectionSample: Decoded sample

    Raises:
        DecodeFault: If the response is not a document or a present field
            has an unusable type
    """
    full_name = collection_full_name(database, collection)

    if not isinstance(raw, Mapping):
        raise DecodeFault(
            full_name, f"collStats response for {full_name} is not a document"
        )

    try:
        return CollectionSample.model_validate(
            {**raw, "database": database, "collection": collection}
        )
    except ValidationError as e:
        raise DecodeFault(
            full_name,
            f"cannot decode collStats response for {full_name}: "
            f"{e.error_count()} invalid field(s)",
        ) from e
