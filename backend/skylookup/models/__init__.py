"""
Lookup service Pydantic models package.

This package contains the validated identifier types and the Pydantic v2
models used to shape records handed to callers.
"""

from .identifiers import (
    ModeS,
    Callsign,
    Icao,
    NNumber,
    AirlineCode,
)

from .aircraft import (
    AircraftModel,
    AircraftPhotoModel,
)

from .flightroute import (
    FlightrouteModel,
    ScrapedRoute,
)

from .airline import AirlineModel

__all__ = [
    # Identifiers
    "ModeS",
    "Callsign",
    "Icao",
    "NNumber",
    "AirlineCode",

    # Aircraft
    "AircraftModel",
    "AircraftPhotoModel",

    # Flightroute
    "FlightrouteModel",
    "ScrapedRoute",

    # Airline
    "AirlineModel",
]
