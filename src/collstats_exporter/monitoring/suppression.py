"""
Warning suppression for chronic faults

A fault that persists across cycles would otherwise log the same warning on
every scrape. The first failure for a key logs and suppresses the key; later
failures stay silent until a success for the same key lifts the suppression,
so each fault episode produces exactly one warning.
"""

import threading

from ..utils.logging import ContextualLogger, get_logger

# Key used for faults listing the databases themselves
DISCOVERY_KEY = ""

SUPPRESSED_SUFFIX = "This log message will be suppressed from now."


class LogSuppressor:
    """Thread-safe set of fault keys whose warning has already been written"""

    def __init__(self, logger: ContextualLogger | None = None):
        self.logger = logger or get_logger(__name__)
        self._keys: set[str] = set()
        self._lock = threading.Lock()

    def should_log(self, key: str) -> bool:
        """True if no warning has been written for this key's current episode"""
        with self._lock:
            return key not in self._keys

    def suppress(self, key: str):
        with self._lock:
            self._keys.add(key)

    def unsuppress(self, key: str):
        with self._lock:
            self._keys.discard(key)

    def warn(self, key: str, message: str, **context) -> bool:
        """
        Write a warning for the key unless it is already suppressed

        Check and insert happen under one lock acquisition, so concurrent
        failures for the same key still write a single warning.

        Args:
            key: Fault key (discovery key, database name or full collection name)
            message: Warning text
            **context: Extra structured fields for the log record

        Returns:
            bool: True if the warning was written
        """
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)

        self.logger.warning(f"{message}. {SUPPRESSED_SUFFIX}", fault_key=key, **context)
        return True

    def resolve(self, key: str):
        """Mark the key healthy again so its next failure is logged"""
        self.unsuppress(key)

    def clear(self):
        with self._lock:
            self._keys.clear()

    def __contains__(self, key: str) -> bool:
        return not self.should_log(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
