"""
Utilities for serializing tracker data model objects into JSON. Example:

    state = model.AircraftState(...)
    model.json.dumps([state, ...])

This is equivalent to:

    state = model.AircraftState(...)
    json.dumps([state, ...], default=<private serialization function>, allow_nan=False, separators=(",", ":"))

Absent (None) attributes are left out of the output entirely. Enriched aircraft from the query module are flattened,
so that the airline, type, distance and direction sit next to the attributes of the underlying state.
"""

import dataclasses
import json
from typing import Any

from flight_tracker.model.aircraft import AircraftState
from flight_tracker.model.icao_address import ICAOAddress
from flight_tracker.model.position import Position
from flight_tracker.query import TrackedAircraft


def _state(state: AircraftState) -> dict[str, Any]:
    result = {
        f.name: getattr(state, f.name) for f in dataclasses.fields(state) if getattr(state, f.name) is not None
    }
    # Housekeeping timestamps are readings of a monotonic clock and mean nothing outside this process.
    del result["first_seen"]
    del result["last_seen"]
    return result


def _default(obj: Any) -> Any:
    if isinstance(obj, AircraftState):
        return _state(obj)
    if isinstance(obj, TrackedAircraft):
        extras = {
            "airline": obj.airline,
            "type": obj.aircraft_type,
            "distance": obj.distance,
            "direction": obj.direction,
        }
        return _state(obj.state) | {k: v for k, v in extras.items() if v is not None}
    if isinstance(obj, ICAOAddress):
        return str(obj)
    if isinstance(obj, Position):
        return {"latitude": obj.latitude, "longitude": obj.longitude}
    raise TypeError(f"object of type {type(obj).__name__!r} is not JSON serializable")


def dumps(obj: Any) -> str:
    return json.dumps(obj, default=_default, allow_nan=False, separators=(",", ":"))
