"""
Validated identifier value types.

Each type is a ``str`` subclass whose constructor rejects malformed input
with ``InvalidIdentifier``, so an unvalidated string cannot reach a store.
"""

import re
from typing import Optional

from ..utils.errors import ErrorMessages, InvalidIdentifier


class _Identifier(str):
    """Base for validated identifiers."""

    pattern: "re.Pattern[str]"
    error_message: str = "Invalid data"

    def __new__(cls, value: object):
        if not isinstance(value, str):
            raise InvalidIdentifier(cls.error_message)
        normalized = cls.normalize(value)
        if not cls.pattern.fullmatch(normalized):
            raise InvalidIdentifier(cls.error_message)
        return super().__new__(cls, normalized)

    @classmethod
    def normalize(cls, value: str) -> str:
        return value

    @classmethod
    def parse(cls, value: object) -> Optional["_Identifier"]:
        """Return the identifier, or None when the input is missing or malformed."""
        if value is None:
            return None
        try:
            return cls(value)
        except InvalidIdentifier:
            return None


class ModeS(_Identifier):
    """6 hex character transponder code, accepted in any case and stored uppercase."""

    pattern = re.compile(r"[0-9A-Fa-f]{6}")
    error_message = ErrorMessages.INVALID_MODE_S

    @classmethod
    def normalize(cls, value: str) -> str:
        # validate before uppercasing so non-ASCII case folds can't sneak through
        return value.upper() if cls.pattern.fullmatch(value) else value


class Callsign(_Identifier):
    """4 to 8 uppercase alphanumeric characters; lowercase input is rejected."""

    pattern = re.compile(r"[A-Z0-9]{4,8}")
    error_message = ErrorMessages.INVALID_CALLSIGN


class Icao(_Identifier):
    """3 or 4 letter airport code."""

    pattern = re.compile(r"[A-Z]{3,4}")
    error_message = ErrorMessages.INVALID_ICAO


class NNumber(_Identifier):
    """US civil registration such as N1, N12AB or N99999."""

    pattern = re.compile(r"N[1-9](([0-9]{0,4})|([0-9]{0,3}[A-HJ-NP-Z])|([0-9]{0,2}[A-HJ-NP-Z]{2}))")
    error_message = ErrorMessages.INVALID_N_NUMBER

    @classmethod
    def normalize(cls, value: str) -> str:
        return value.upper() if value.isascii() else value


class AirlineCode(_Identifier):
    """Two character IATA prefix such as U2, or three letter ICAO prefix such as EZY."""

    pattern = re.compile(r"[A-Z0-9]{2}|[A-Z]{3}")
    error_message = ErrorMessages.INVALID_AIRLINE

    @property
    def is_iata(self) -> bool:
        return len(self) == 2
