"""
These are the objects returned by Decoder's `decode` method.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from flight_tracker.model.aircraft import AircraftUpdate
from flight_tracker.model.icao_address import ICAOAddress
from flight_tracker.sbs import DecodingError


class MessageClass(Enum):
    """
    The kinds of SBS-1 lines the tracker understands. `MSG` lines are further divided by their transmission type
    (field 1); the values of the MSG members are those transmission types.
    """

    # fmt:off
    IDENTIFICATION        = 1  # callsign
    SURFACE_POSITION      = 2  # altitude, ground speed, track, position
    AIRBORNE_POSITION     = 3  # altitude, position
    AIRBORNE_VELOCITY     = 4  # ground speed, track, vertical rate
    SURVEILLANCE_ALTITUDE = 5  # altitude
    SURVEILLANCE_ID       = 6  # altitude (and squawk, which isn't tracked)
    AIR_TO_AIR            = 7  # altitude
    ALL_CALL_REPLY        = 8  # nothing but the address
    NEW_ID                = "ID"   # a callsign was seen for an aircraft
    NEW_AIRCRAFT          = "AIR"  # an aircraft was seen for the first time
    # fmt:on

    @classmethod
    def from_fields(cls, tag: str, transmission_type: str) -> Self:
        match tag:
            case "ID":
                return cls.NEW_ID
            case "AIR":
                return cls.NEW_AIRCRAFT
            case "MSG":
                try:
                    return cls(int(transmission_type))
                except ValueError as exc:
                    raise DecodingError(f"don't know MSG transmission type {transmission_type!r}") from exc
            case _:
                raise DecodingError(f"don't know message type {tag!r}")


@dataclass(frozen=True)
class RawMessage:
    """
    One decoded SBS-1 line. Every message has an ICAO address; `update` holds whichever aircraft attributes the line
    carried. RawMessages are ephemeral: they exist only on their way from the decoder to the registry.
    """

    message_class: MessageClass
    icao_address: ICAOAddress
    update: AircraftUpdate

    @property
    def transmission_type(self) -> int | None:
        return self.message_class.value if isinstance(self.message_class.value, int) else None
