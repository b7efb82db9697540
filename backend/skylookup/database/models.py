"""
SQLAlchemy database models for the lookup service.

This module defines the relational schema that backs aircraft and
flightroute resolution:
- Country: country name and ISO code shared by aircraft owners and airports
- AircraftPhoto: photo URLs discovered for an aircraft
- Aircraft: registration details keyed by ModeS
- Airport: airport metadata keyed by ICAO code
- Airline: operator names with their IATA and ICAO prefixes
- FlightrouteCallsign: callsigns that have a known route
- Flightroute: origin, optional midpoint and destination of a callsign
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Index, Numeric
from sqlalchemy.orm import declarative_base

# Create the declarative base for all models
Base = declarative_base()


class Country(Base):
    """Country referenced by aircraft owners and airports."""
    __tablename__ = 'country'

    country_id = Column(Integer, primary_key=True, autoincrement=True)
    country_name = Column(String(100), nullable=False)
    country_iso_name = Column(String(2), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Country(id={self.country_id}, iso='{self.country_iso_name}', name='{self.country_name}')>"


class AircraftPhoto(Base):
    """
    Photo of an aircraft.

    Rows are only created when an aircraft without a photo is looked up
    and the photo source returns one.
    """
    __tablename__ = 'aircraft_photo'

    aircraft_photo_id = Column(Integer, primary_key=True, autoincrement=True)
    url_photo = Column(String(255), nullable=False)
    url_photo_thumbnail = Column(String(255), nullable=False)
    photographer = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<AircraftPhoto(id={self.aircraft_photo_id}, url='{self.url_photo}')>"


class Aircraft(Base):
    """
    Aircraft registration keyed by ModeS.

    ``aircraft_id`` is internal and only used to link a photo row.
    """
    __tablename__ = 'aircraft'

    aircraft_id = Column(Integer, primary_key=True, autoincrement=True)
    mode_s = Column(String(6), unique=True, nullable=False, index=True)  # uppercase hex
    registered_owner = Column(String(100), nullable=False)
    operator_flag_code = Column(String(8), nullable=True)
    country_id = Column(Integer, ForeignKey('country.country_id'), nullable=False, index=True)
    manufacturer = Column(String(100), nullable=False)
    type = Column(String(100), nullable=False)
    icao_type = Column(String(8), nullable=False)
    aircraft_photo_id = Column(
        Integer, ForeignKey('aircraft_photo.aircraft_photo_id'), nullable=True
    )

    def __repr__(self):
        return f"<Aircraft(id={self.aircraft_id}, mode_s='{self.mode_s}', type='{self.type}')>"


class Airport(Base):
    """Airport metadata returned inside flightroute records."""
    __tablename__ = 'airport'

    airport_id = Column(Integer, primary_key=True, autoincrement=True)
    icao_code = Column(String(4), unique=True, nullable=False, index=True)
    iata_code = Column(String(3), nullable=True)
    name = Column(String(100), nullable=False)
    municipality = Column(String(100), nullable=True)
    country_id = Column(Integer, ForeignKey('country.country_id'), nullable=False)
    elevation = Column(Integer, nullable=True)  # feet
    latitude = Column(Numeric(9, 6), nullable=False)
    longitude = Column(Numeric(9, 6), nullable=False)

    def __repr__(self):
        return f"<Airport(id={self.airport_id}, icao='{self.icao_code}', name='{self.name}')>"


class Airline(Base):
    """Operator looked up by its IATA or ICAO prefix."""
    __tablename__ = 'airline'

    airline_id = Column(Integer, primary_key=True, autoincrement=True)
    airline_name = Column(String(100), nullable=False)
    country_id = Column(Integer, ForeignKey('country.country_id'), nullable=False)
    iata_prefix = Column(String(2), nullable=True, index=True)
    icao_prefix = Column(String(3), nullable=False, index=True)
    airline_callsign = Column(String(50), nullable=True)

    def __repr__(self):
        return f"<Airline(id={self.airline_id}, icao='{self.icao_prefix}', name='{self.airline_name}')>"


class FlightrouteCallsign(Base):
    """Callsign with a stored route."""
    __tablename__ = 'flightroute_callsign'

    flightroute_callsign_id = Column(Integer, primary_key=True, autoincrement=True)
    callsign = Column(String(8), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<FlightrouteCallsign(id={self.flightroute_callsign_id}, callsign='{self.callsign}')>"


class Flightroute(Base):
    """
    Route flown under a callsign.

    Created once after a successful external resolution and never updated.
    """
    __tablename__ = 'flightroute'

    flightroute_id = Column(Integer, primary_key=True, autoincrement=True)
    flightroute_callsign_id = Column(
        Integer,
        ForeignKey('flightroute_callsign.flightroute_callsign_id'),
        unique=True,
        nullable=False,
    )
    airport_origin_id = Column(Integer, ForeignKey('airport.airport_id'), nullable=False)
    airport_midpoint_id = Column(Integer, ForeignKey('airport.airport_id'), nullable=True)
    airport_destination_id = Column(Integer, ForeignKey('airport.airport_id'), nullable=False)

    def __repr__(self):
        return (
            f"<Flightroute(id={self.flightroute_id}, callsign_id={self.flightroute_callsign_id}, "
            f"origin={self.airport_origin_id}, destination={self.airport_destination_id})>"
        )


Index('idx_flightroute_airports', Flightroute.airport_origin_id, Flightroute.airport_destination_id)


def create_all_tables(connection):
    """
    Create all database tables on a synchronous connection.

    Args:
        connection: SQLAlchemy connection, typically passed by ``run_sync``
    """
    Base.metadata.create_all(bind=connection)


def drop_all_tables(connection):
    """
    Drop all database tables on a synchronous connection.

    Args:
        connection: SQLAlchemy connection, typically passed by ``run_sync``
    """
    Base.metadata.drop_all(bind=connection)


__all__ = [
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
]
