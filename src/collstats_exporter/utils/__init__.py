"""
Utilities package initialization.

Exports:
- get_logger / setup_logging: structlog-backed logging helpers.
"""

from .logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
