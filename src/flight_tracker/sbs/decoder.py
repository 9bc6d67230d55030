"""
Decoder for SBS-1 ("BaseStation") lines, as served by dump1090 on port 30003. A line looks like this:

    MSG,3,1,1,4CA2D6,1,2024/01/01,12:00:00.000,2024/01/01,12:00:00.000,,35000,,,37.50000,-122.30000,,,0,0,0,0

Only the fields needed for tracking are extracted. Their positions in the line are fixed regardless of message type;
a message type that doesn't carry a field leaves it empty.
"""

from collections.abc import Callable
import math
from typing import TypeVar

from flight_tracker.model.aircraft import AircraftUpdate
from flight_tracker.model.icao_address import ICAOAddress
from flight_tracker.model.position import Position
from flight_tracker.sbs import DecodingError
from flight_tracker.sbs.message import MessageClass, RawMessage

S = TypeVar("S")
T = TypeVar("T")


SUPPORTED_TAGS = frozenset(("MSG", "ID", "AIR"))

# fmt:off
TAG               = 0
TRANSMISSION_TYPE = 1
HEX_IDENT         = 4
CALLSIGN          = 10
ALTITUDE          = 11
GROUND_SPEED      = 12
TRACK             = 13
LATITUDE          = 14
LONGITUDE         = 15
VERTICAL_RATE     = 16
# fmt:on


class Decoder:
    """
    The decoder takes SBS-1 lines and turns them into RawMessage objects. It is stateless: the result of decoding a
    line never depends on lines decoded before it.

    Lines that aren't one of the supported message types, and lines that are but can't be decoded, are "not
    applicable" and yield None. The feed routinely carries message types the tracker has no use for, so neither case
    is treated as an error.
    """

    def decode(self, line: str) -> RawMessage | None:
        fields = line.strip().split(",")
        if fields[TAG].strip() not in SUPPORTED_TAGS:
            return None
        try:
            return self._decode(fields)
        except DecodingError:
            return None

    def _decode(self, fields: list[str]) -> RawMessage:
        message_class = MessageClass.from_fields(fields[TAG].strip(), _field(fields, TRANSMISSION_TYPE) or "")

        hex_ident = _field(fields, HEX_IDENT)
        if hex_ident is None:
            raise DecodingError("missing hex ident")
        icao_address = _convert(hex_ident, ICAOAddress, "hex ident")

        latitude = _number(fields, LATITUDE, _real)
        longitude = _number(fields, LONGITUDE, _real)
        position = None
        if latitude is not None and longitude is not None:
            position = _convert((latitude, longitude), lambda lat_lon: Position(*lat_lon), "position")

        update = AircraftUpdate(
            callsign=_field(fields, CALLSIGN),
            altitude=_number(fields, ALTITUDE, _integer),
            ground_speed=_number(fields, GROUND_SPEED, _real),
            track=_number(fields, TRACK, _real),
            position=position,
            vertical_rate=_number(fields, VERTICAL_RATE, _integer),
        )
        return RawMessage(message_class, icao_address, update)


def _field(fields: list[str], index: int) -> str | None:
    """
    Return the stripped field at `index`, or None if the field is empty or the line is too short to have it.
    """
    if index >= len(fields):
        return None
    return fields[index].strip() or None


def _number(fields: list[str], index: int, kind: Callable[[str], T]) -> T | None:
    raw = _field(fields, index)
    if raw is None:
        return None
    return _convert(raw, kind, f"field {index}")


def _convert(raw: S, kind: Callable[[S], T], what: str) -> T:
    try:
        return kind(raw)
    except (TypeError, ValueError) as exc:
        raise DecodingError(f"invalid {what}: {raw!r}") from exc


def _real(raw: str) -> float:
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {raw}")
    return value


def _integer(raw: str) -> int:
    # Some feeds send altitudes and rates with a trailing ".0".
    value = _real(raw)
    if not value.is_integer():
        raise ValueError(f"not an integer: {raw}")
    return int(value)
