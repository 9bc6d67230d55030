"""
Turning a registry snapshot into the list a display wants: aircraft described with their airline and type, located
relative to a reference point (usually the receiver), sorted by some attribute and cut to length.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Self

from flight_tracker.model.aircraft import AircraftState
from flight_tracker.model.position import Position
from flight_tracker.reference import ReferenceData


# Names accepted by OrderBy that don't match an attribute name. Ordering by "age" means ordering by the number of
# messages received, i.e. how long and how well an aircraft has been tracked.
_FIELD_ALIASES = {
    "age": "message_count",
    "type": "aircraft_type",
    "speed": "ground_speed",
    "heading": "track",
    "lat": "latitude",
    "lng": "longitude",
}

# Attributes whose values compare with one another, so aircraft can be sorted by them.
ORDERABLE_FIELDS = frozenset(
    (
        "callsign",
        "altitude",
        "ground_speed",
        "track",
        "vertical_rate",
        "latitude",
        "longitude",
        "message_count",
        "age_seconds",
        "airline",
        "aircraft_type",
        "distance",
        "direction",
    )
)


@dataclass(frozen=True)
class OrderBy:
    field: str
    ascending: bool = True

    def __post_init__(self) -> None:
        if _FIELD_ALIASES.get(self.field, self.field) not in ORDERABLE_FIELDS:
            raise ValueError(f"can't order aircraft by {self.field!r}")

    @classmethod
    def parse(cls, text: str) -> Self:
        """
        Parse an ordering written as "<field>:asc" or "<field>:desc", e.g. "distance:asc".
        """
        parts = text.strip().split(":")
        if len(parts) != 2 or not parts[0] or parts[1] not in ("asc", "desc"):
            raise ValueError(f'invalid ordering {text!r}; expected "<field>:asc" or "<field>:desc"')
        return cls(parts[0], parts[1] == "asc")


@dataclass(frozen=True)
class Query:
    order_by: OrderBy | None = None
    limit: int | None = None
    reference: Position | None = None
    callsign_only: bool = True


@dataclass
class TrackedAircraft:
    """
    An aircraft state together with what can be worked out about it beyond what its messages said. `distance` is in
    metres and `direction` in degrees clockwise from true north, both as seen from the query's reference point.
    """

    state: AircraftState
    airline: str | None = None
    aircraft_type: str | None = None
    distance: float | None = None
    direction: float | None = None

    def value(self, field: str) -> Any:
        name = _FIELD_ALIASES.get(field, field)
        if name in ("airline", "aircraft_type", "distance", "direction"):
            return getattr(self, name)
        return getattr(self.state, name, None)


def enrich(
    states: Iterable[AircraftState],
    reference: Position | None = None,
    reference_data: ReferenceData | None = None,
    callsign_only: bool = True,
) -> list[TrackedAircraft]:
    result: list[TrackedAircraft] = []
    for state in states:
        if callsign_only and not state.callsign:
            continue
        aircraft = TrackedAircraft(state)
        if reference_data is not None:
            aircraft.airline = reference_data.airline_name(state)
            aircraft.aircraft_type = reference_data.aircraft_type(state)
        if reference is not None and state.position is not None:
            aircraft.distance = reference.distance_to(state.position)
            aircraft.direction = reference.bearing_to(state.position)
        result.append(aircraft)
    return result


def order(aircraft: Iterable[TrackedAircraft], order_by: OrderBy) -> list[TrackedAircraft]:
    """
    Sort aircraft by one attribute. Aircraft with no value for the attribute are left out, since there's no sensible
    place to put them. Strings are compared without regard to case.
    """

    def key(a: TrackedAircraft) -> Any:
        value = a.value(order_by.field)
        return value.lower() if isinstance(value, str) else value

    present = [a for a in aircraft if a.value(order_by.field) is not None]
    return sorted(present, key=key, reverse=not order_by.ascending)


def apply(
    states: Iterable[AircraftState], query: Query, reference_data: ReferenceData | None = None
) -> list[TrackedAircraft]:
    aircraft = enrich(states, query.reference, reference_data, query.callsign_only)
    if query.order_by is not None:
        aircraft = order(aircraft, query.order_by)
    if query.limit is not None and query.limit > 0:
        aircraft = aircraft[: query.limit]
    return aircraft
