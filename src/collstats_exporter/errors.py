"""
Fault taxonomy for the collStats pipeline

Every fault is handled at the level where it occurs; none of them stops the
process.
"""


class CollStatsError(Exception):
    """Base class for collection-statistics faults"""


class DiscoveryFault(CollStatsError):
    """Database names could not be listed; the cycle yields no samples"""


class DatabaseFault(CollStatsError):
    """Collection names of one database could not be listed"""

    def __init__(self, database: str, message: str = ""):
        self.database = database
        super().__init__(message or f"cannot list collections of {database}")


class CollectionFault(CollStatsError):
    """Statistics of one collection could not be fetched or decoded"""

    def __init__(self, full_name: str, message: str = ""):
        self.full_name = full_name
        super().__init__(message or f"cannot collect stats for {full_name}")


class DecodeFault(CollectionFault):
    """The top-level collStats response could not be parsed"""
