"""
Environment configuration loader with validation for the lookup service.
"""

import os
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from dotenv import load_dotenv


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


class AppConfig(BaseModel):
    """Configuration model for the lookup service with validation."""

    model_config = ConfigDict(frozen=True)

    # Relational store
    database_url: str = Field(
        default="sqlite+aiosqlite:///skylookup.db",
        description="SQLAlchemy async database URL",
    )
    db_pool_size: int = Field(default=10, ge=1, description="Base connection pool size")
    db_max_overflow: int = Field(
        default=20, ge=0, description="Connections allowed beyond the pool size"
    )
    db_pool_timeout: int = Field(
        default=30, ge=1, description="Seconds to queue for a pooled connection"
    )

    # Valkey cache
    valkey_host: str = Field(default="localhost", description="Valkey server host")
    valkey_port: int = Field(
        default=6379, ge=1, le=65535, description="Valkey server port"
    )
    valkey_password: Optional[str] = Field(
        default=None, description="Valkey server password"
    )
    valkey_database: int = Field(
        default=0, ge=0, le=15, description="Valkey database number"
    )
    valkey_max_connections: int = Field(
        default=10, ge=1, description="Maximum Valkey connections"
    )
    valkey_socket_timeout: float = Field(
        default=5.0, gt=0, description="Valkey socket timeout in seconds"
    )
    valkey_socket_connect_timeout: float = Field(
        default=5.0, gt=0, description="Valkey connection timeout in seconds"
    )

    # External sources
    url_callsign: str = Field(
        default="https://www.flightradar24.com/data/flights",
        description="Base URL scraped for route text, callsign is appended",
    )
    url_aircraft_photo: str = Field(
        default="https://airport-data.com/api",
        description="Base URL of the photo thumbnail API",
    )
    route_timeout_seconds: float = Field(
        default=2.5, gt=0, le=30, description="Timeout for the route scrape"
    )
    photo_timeout_seconds: float = Field(
        default=1.0, gt=0, le=30, description="Timeout for the photo lookup"
    )

    # Service behaviour
    rate_limit_enabled: bool = Field(default=True, description="Gate requests per client")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("url_callsign", "url_aircraft_photo")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with '/' so keep them bare."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Optional path to .env file. If None, looks for .env in current directory.

    Returns:
        AppConfig: Validated configuration object

    Raises:
        ValueError: If configuration is invalid
    """
    if env_file is None:
        env_file = ".env"

    if os.path.exists(env_file):
        load_dotenv(env_file)

    config_data: Dict[str, Any] = {
        "database_url": os.getenv("DATABASE_URL", "sqlite+aiosqlite:///skylookup.db"),
        "db_pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
        "db_max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "20")),
        "db_pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
        "valkey_host": os.getenv("VALKEY_HOST", "localhost"),
        "valkey_port": int(os.getenv("VALKEY_PORT", "6379")),
        "valkey_password": os.getenv("VALKEY_PASSWORD") or None,
        "valkey_database": int(os.getenv("VALKEY_DATABASE", "0")),
        "valkey_max_connections": int(os.getenv("VALKEY_MAX_CONNECTIONS", "10")),
        "valkey_socket_timeout": float(os.getenv("VALKEY_SOCKET_TIMEOUT", "5.0")),
        "valkey_socket_connect_timeout": float(
            os.getenv("VALKEY_SOCKET_CONNECT_TIMEOUT", "5.0")
        ),
        "url_callsign": os.getenv(
            "URL_CALLSIGN", "https://www.flightradar24.com/data/flights"
        ),
        "url_aircraft_photo": os.getenv(
            "URL_AIRCRAFT_PHOTO", "https://airport-data.com/api"
        ),
        "route_timeout_seconds": float(os.getenv("ROUTE_TIMEOUT_SECONDS", "2.5")),
        "photo_timeout_seconds": float(os.getenv("PHOTO_TIMEOUT_SECONDS", "1.0")),
        "rate_limit_enabled": _as_bool(os.getenv("RATE_LIMIT_ENABLED", "true")),
        "debug": _as_bool(os.getenv("DEBUG", "false")),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }

    try:
        return AppConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global configuration instance, loading it if necessary.

    Returns:
        AppConfig: The global configuration object
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config
