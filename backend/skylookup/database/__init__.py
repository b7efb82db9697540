"""
Database package for the lookup service.

This package provides SQLAlchemy models, the async engine configuration
and the persistent store queries used by the resolution pipeline.
"""

from .models import (
    Base,
    Country,
    AircraftPhoto,
    Aircraft,
    Airport,
    Airline,
    FlightrouteCallsign,
    Flightroute,
    create_all_tables,
    drop_all_tables,
)

from .config import DatabaseConfig, get_async_database_url
from .queries import PersistentStore

__all__ = [
    # Models
    'Base',
    'Country',
    'AircraftPhoto',
    'Aircraft',
    'Airport',
    'Airline',
    'FlightrouteCallsign',
    'Flightroute',
    'create_all_tables',
    'drop_all_tables',

    # Configuration
    'DatabaseConfig',
    'get_async_database_url',

    # Queries
    'PersistentStore',
]
