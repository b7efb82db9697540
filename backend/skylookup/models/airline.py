"""
Airline-related Pydantic models for the lookup service.
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class AirlineModel(BaseModel):
    """Operator record; several can share one IATA prefix."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    name: str
    icao_prefix: str = Field(..., min_length=3, max_length=3)
    iata_prefix: Optional[str] = Field(None, max_length=2)
    callsign: Optional[str] = Field(None, description="Radio telephony callsign, e.g. 'EASY'")
    country_name: str
    country_iso_name: str = Field(..., max_length=2)
