from dataclasses import dataclass, fields, replace
from typing import Self

from flight_tracker.model.icao_address import ICAOAddress
from flight_tracker.model.position import Position


@dataclass(frozen=True)
class AircraftUpdate:
    """
    The subset of an aircraft's attributes carried by a single message. Each SBS-1 message type carries a different,
    mostly disjoint subset, so every attribute is optional and `None` means "this message says nothing about it".
    """

    # fmt:off
    callsign:      str      | None = None
    altitude:      int      | None = None  # feet
    ground_speed:  float    | None = None  # knots
    track:         float    | None = None  # degrees
    position:      Position | None = None
    vertical_rate: int      | None = None  # feet per minute
    # fmt:on

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass
class AircraftState:
    """
    Everything currently known about one tracked aircraft: the result of merging every message received for its ICAO
    address since it was first seen.

    Attributes are only ever overwritten by a newer message that carries them, so an attribute that no message has
    carried stays `None`. `first_seen` and `last_seen` are readings of the registry's clock; `age_seconds` is only
    meaningful on snapshot copies, where it is the time since `last_seen` at the moment the snapshot was taken.
    """

    # fmt:off
    icao_address:  ICAOAddress
    callsign:      str      | None = None
    altitude:      int      | None = None
    ground_speed:  float    | None = None
    track:         float    | None = None
    position:      Position | None = None
    vertical_rate: int      | None = None

    first_seen:    float = 0.0
    last_seen:     float = 0.0
    message_count: int   = 0
    age_seconds:   float = 0.0
    # fmt:on

    def merge(self, update: AircraftUpdate) -> None:
        for field in fields(update):
            value = getattr(update, field.name)
            if value is not None:
                setattr(self, field.name, value)

    def copy(self, now: float) -> Self:
        return replace(self, age_seconds=max(0.0, now - self.last_seen))

    @property
    def latitude(self) -> float | None:
        return self.position.latitude if self.position is not None else None

    @property
    def longitude(self) -> float | None:
        return self.position.longitude if self.position is not None else None
