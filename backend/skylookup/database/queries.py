"""
Persistent store queries used by the resolution pipeline.

All reads return plain dictionaries shaped like the records handed to
callers, so the pipeline can cache them as JSON without further mapping.
Reads raise InternalFailure when the database is unreachable; writes log
and swallow failures so that a lookup still returns what it has.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.orm import aliased

from ..models import AirlineCode
from ..utils.timing import timed
from .config import DatabaseConfig
from .models import (
    Aircraft,
    AircraftPhoto,
    Airline,
    Airport,
    Country,
    Flightroute,
    FlightrouteCallsign,
)

logger = logging.getLogger(__name__)

AIRPORT_ROLES = ("origin", "midpoint", "destination")


def _normalize_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a result mapping to JSON-friendly values; decimals become strings."""
    output = {}
    for key, value in row.items():
        output[key] = str(value) if isinstance(value, Decimal) else value
    return output


class PersistentStore:
    """Parameterized queries against the relational store."""

    def __init__(self, db: DatabaseConfig):
        self.db = db

    async def health_check(self) -> bool:
        return await self.db.test_connection()

    @timed()
    async def select_aircraft(self, mode_s: str) -> Optional[Dict[str, Any]]:
        """
        Select the joined aircraft record for a ModeS.

        Args:
            mode_s: Uppercase ModeS

        Returns:
            Aircraft record including the internal ``aircraft_id``, or None
        """
        query = (
            select(
                Aircraft.aircraft_id,
                Aircraft.mode_s,
                Aircraft.registered_owner,
                Aircraft.operator_flag_code.label("registered_owner_operator_flag_code"),
                Country.country_name.label("registered_owner_country_name"),
                Country.country_iso_name.label("registered_owner_country_iso_name"),
                Aircraft.manufacturer,
                Aircraft.type,
                Aircraft.icao_type,
                AircraftPhoto.url_photo,
                AircraftPhoto.url_photo_thumbnail,
            )
            .join(Country, Aircraft.country_id == Country.country_id)
            .outerjoin(
                AircraftPhoto, Aircraft.aircraft_photo_id == AircraftPhoto.aircraft_photo_id
            )
            .where(Aircraft.mode_s == mode_s.upper())
        )
        async with self.db.session() as session:
            row = (await session.execute(query)).mappings().first()
        return _normalize_row(row) if row else None

    @timed()
    async def select_flightroute(self, callsign: str) -> Optional[Dict[str, Any]]:
        """
        Select the joined flightroute record for a callsign.

        Every airport column is prefixed by its role, e.g.
        ``origin_airport_icao_code``. Midpoint columns are None when the
        route has no midpoint.

        Args:
            callsign: Uppercase callsign

        Returns:
            Flat flightroute record, or None
        """
        airports = {role: aliased(Airport, name=f"ap_{role}") for role in AIRPORT_ROLES}
        countries = {role: aliased(Country, name=f"co_{role}") for role in AIRPORT_ROLES}

        columns = [FlightrouteCallsign.callsign]
        for role in AIRPORT_ROLES:
            ap, co = airports[role], countries[role]
            prefix = f"{role}_airport"
            columns.extend([
                co.country_name.label(f"{prefix}_country_name"),
                co.country_iso_name.label(f"{prefix}_country_iso_name"),
                ap.municipality.label(f"{prefix}_municipality"),
                ap.icao_code.label(f"{prefix}_icao_code"),
                ap.iata_code.label(f"{prefix}_iata_code"),
                ap.name.label(f"{prefix}_name"),
                ap.elevation.label(f"{prefix}_elevation"),
                ap.latitude.label(f"{prefix}_latitude"),
                ap.longitude.label(f"{prefix}_longitude"),
            ])

        origin, midpoint, destination = (airports[r] for r in AIRPORT_ROLES)
        query = (
            select(*columns)
            .select_from(Flightroute)
            .join(
                FlightrouteCallsign,
                Flightroute.flightroute_callsign_id == FlightrouteCallsign.flightroute_callsign_id,
            )
            .join(origin, Flightroute.airport_origin_id == origin.airport_id)
            .join(countries["origin"], origin.country_id == countries["origin"].country_id)
            .outerjoin(midpoint, Flightroute.airport_midpoint_id == midpoint.airport_id)
            .outerjoin(countries["midpoint"], midpoint.country_id == countries["midpoint"].country_id)
            .join(destination, Flightroute.airport_destination_id == destination.airport_id)
            .join(
                countries["destination"],
                destination.country_id == countries["destination"].country_id,
            )
            .where(FlightrouteCallsign.callsign == callsign)
        )
        async with self.db.session() as session:
            row = (await session.execute(query)).mappings().first()
        return _normalize_row(row) if row else None

    @timed()
    async def select_airlines(self, code: AirlineCode) -> Optional[List[Dict[str, Any]]]:
        """
        Select every operator sharing an airline prefix.

        A two character code matches the IATA prefix, a three letter code the
        ICAO prefix. Several operators can share an IATA prefix.

        Args:
            code: Validated airline code

        Returns:
            Airline records ordered by name, or None when nothing matches
        """
        prefix_column = Airline.iata_prefix if code.is_iata else Airline.icao_prefix
        query = (
            select(
                Airline.airline_name.label("name"),
                Airline.icao_prefix,
                Airline.iata_prefix,
                Airline.airline_callsign.label("callsign"),
                Country.country_name,
                Country.country_iso_name,
            )
            .join(Country, Airline.country_id == Country.country_id)
            .where(prefix_column == code)
            .order_by(Airline.airline_name)
        )
        async with self.db.session() as session:
            rows = (await session.execute(query)).mappings().all()
        return [_normalize_row(row) for row in rows] or None

    @timed(swallow=True)
    async def insert_flightroute(
        self, callsign: str, origin_icao: str, destination_icao: str
    ) -> bool:
        """
        Insert a callsign and its route in one transaction.

        Unknown airports leave the route without an origin or destination,
        which violates the schema and rolls the whole insert back.

        Returns:
            True when committed, None when rolled back
        """

        def airport_id(icao: str):
            return (
                select(Airport.airport_id)
                .where(Airport.icao_code == icao)
                .scalar_subquery()
            )

        async with self.db.session() as session:
            async with session.begin():
                callsign_id = (
                    await session.execute(
                        insert(FlightrouteCallsign)
                        .values(callsign=callsign)
                        .returning(FlightrouteCallsign.flightroute_callsign_id)
                    )
                ).scalar_one()
                await session.execute(
                    insert(Flightroute).values(
                        flightroute_callsign_id=callsign_id,
                        airport_origin_id=airport_id(origin_icao),
                        airport_destination_id=airport_id(destination_icao),
                    )
                )
        logger.info(f"Inserted flightroute {callsign}: {origin_icao} -> {destination_icao}")
        return True

    @timed(swallow=True)
    async def insert_photo(
        self, url_photo: str, url_photo_thumbnail: str, photographer: Optional[str] = None
    ) -> int:
        """
        Insert an aircraft photo row.

        Returns:
            New aircraft_photo_id, or None on failure
        """
        async with self.db.session() as session:
            async with session.begin():
                photo_id = (
                    await session.execute(
                        insert(AircraftPhoto)
                        .values(
                            url_photo=url_photo,
                            url_photo_thumbnail=url_photo_thumbnail,
                            photographer=photographer,
                        )
                        .returning(AircraftPhoto.aircraft_photo_id)
                    )
                ).scalar_one()
        return photo_id

    @timed(swallow=True)
    async def update_aircraft_photo(self, photo_id: int, aircraft_id: int) -> None:
        async with self.db.session() as session:
            async with session.begin():
                await session.execute(
                    update(Aircraft)
                    .where(Aircraft.aircraft_id == aircraft_id)
                    .values(aircraft_photo_id=photo_id)
                )
