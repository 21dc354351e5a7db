"""
Configuration settings for the collStats exporter
"""

from enum import Enum

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Environment types"""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log levels"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MongoSettings(BaseSettings):
    """MongoDB connection configuration"""

    uri: str = Field(default="mongodb://localhost:27017")
    app_name: str = Field(default="collstats-exporter")
    direct_connection: bool = Field(default=False)
    server_selection_timeout_ms: int = Field(default=5000, ge=1)
    connect_timeout_ms: int = Field(default=10000, ge=1)
    socket_timeout_ms: int = Field(default=30000, ge=1)

    # collStats is requested with this scale factor; values are exported as returned
    stats_scale: int = Field(default=1, ge=1)

    class Config:
        env_prefix = "MONGO_"


class MonitoringSettings(BaseSettings):
    """Monitoring configuration"""

    listen_address: str = Field(default="0.0.0.0")
    prometheus_port: int = Field(default=9216, ge=1, le=65535)
    metric_namespace: str = Field(default="mongodb_mongod")

    # When false, a background loop samples every collection_interval seconds
    # and scrapes only read the last published batch.
    collect_on_scrape: bool = Field(default=True)
    collection_interval: float = Field(default=30.0, gt=0)

    @validator("metric_namespace")
    def validate_namespace(cls, v):
        if not v or not v.replace("_", "").isalnum() or v[0].isdigit():
            raise ValueError("metric_namespace must be a valid Prometheus metric prefix")
        return v

    class Config:
        env_prefix = "MONITORING_"


class Settings(BaseSettings):
    """Main application settings"""

    # Environment
    environment: Environment = Field(default=Environment.PRODUCTION)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    # Application
    app_name: str = Field(default="collstats-exporter")
    app_version: str = Field(default="1.0.0")

    # Component settings
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @validator("environment", pre=True)
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @validator("log_level", pre=True)
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing"""
        return self.environment == Environment.TESTING

    class Config:
        env_prefix = "COLLSTATS_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
