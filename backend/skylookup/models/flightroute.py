"""
Flightroute-related Pydantic models for the lookup service.

A flightroute record is flat: every airport attribute is prefixed with its
role (``origin``, ``midpoint`` or ``destination``).
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict


class ScrapedRoute(BaseModel):
    """ICAO codes extracted from route text; either side may be missing."""

    origin_icao: Optional[str] = None
    destination_icao: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.origin_icao and self.destination_icao)


class FlightrouteModel(BaseModel):
    """Joined flightroute record."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    callsign: str

    origin_airport_country_iso_name: Optional[str] = None
    origin_airport_country_name: Optional[str] = None
    origin_airport_elevation: Optional[int] = None
    origin_airport_iata_code: Optional[str] = None
    origin_airport_icao_code: Optional[str] = None
    origin_airport_latitude: Optional[str] = None
    origin_airport_longitude: Optional[str] = None
    origin_airport_municipality: Optional[str] = None
    origin_airport_name: Optional[str] = None

    midpoint_airport_country_iso_name: Optional[str] = None
    midpoint_airport_country_name: Optional[str] = None
    midpoint_airport_elevation: Optional[int] = None
    midpoint_airport_iata_code: Optional[str] = None
    midpoint_airport_icao_code: Optional[str] = None
    midpoint_airport_latitude: Optional[str] = None
    midpoint_airport_longitude: Optional[str] = None
    midpoint_airport_municipality: Optional[str] = None
    midpoint_airport_name: Optional[str] = None

    destination_airport_country_iso_name: Optional[str] = None
    destination_airport_country_name: Optional[str] = None
    destination_airport_elevation: Optional[int] = None
    destination_airport_iata_code: Optional[str] = None
    destination_airport_icao_code: Optional[str] = None
    destination_airport_latitude: Optional[str] = None
    destination_airport_longitude: Optional[str] = None
    destination_airport_municipality: Optional[str] = None
    destination_airport_name: Optional[str] = None

    def to_output(self) -> Dict[str, Any]:
        """Dump with every falsy attribute removed."""
        return {key: value for key, value in self.model_dump().items() if value}
