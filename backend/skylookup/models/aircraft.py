"""
Aircraft-related Pydantic models for the lookup service.
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class AircraftPhotoModel(BaseModel):
    """Photo returned by the external photo source."""
    model_config = ConfigDict(from_attributes=True)

    url_photo: str = Field(..., description="Full size photo URL")
    url_photo_thumbnail: str = Field(..., description="Thumbnail URL")
    photographer: Optional[str] = Field(None, description="Photo credit")


class AircraftModel(BaseModel):
    """Aircraft record as handed to callers; never carries the internal id."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    type: str = Field(..., description="Aircraft type, e.g. 'A320 232'")
    icao_type: str = Field(..., max_length=8, description="ICAO type designator")
    manufacturer: str
    mode_s: str = Field(..., min_length=6, max_length=6, description="Uppercase ModeS")
    n_number: str = Field("", description="US registration, empty when not US registered")
    registered_owner_country_iso_name: str = Field(..., max_length=2)
    registered_owner_country_name: str
    registered_owner_operator_flag_code: Optional[str] = None
    registered_owner: str
    url_photo: Optional[str] = None
    url_photo_thumbnail: Optional[str] = None
