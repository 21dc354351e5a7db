"""
Logging utilities for the collStats exporter
"""

import logging
import sys

import structlog
from pythonjsonlogger import jsonlogger

from ..config.settings import Settings, settings as default_settings


def setup_logging(settings: Settings | None = None):
    """Setup structured logging for the application"""
    settings = settings or default_settings

    # Clear any existing handlers
    logging.getLogger().handlers.clear()

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Setup root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.value))

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, settings.log_level.value))

    if settings.is_development():
        # Human-readable format for development
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # The driver is chatty at DEBUG (heartbeats, topology events)
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    get_logger(__name__).info(
        "Logging configured successfully",
        log_level=settings.log_level.value,
        environment=settings.environment.value,
    )


class ContextualLogger:
    """Module logger passing keyword fields through to structlog"""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(name)

    def debug(self, message: str, **kwargs):
        """Log debug message"""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message"""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message"""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message"""
        self.logger.error(message, **kwargs)


def get_logger(name: str) -> ContextualLogger:
    """Get a logger instance"""
    return ContextualLogger(name)
