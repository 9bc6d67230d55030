"""
This module contains the application's data model. The primary class is AircraftState, the merged picture of one
tracked aircraft; AircraftUpdate is the partial picture carried by a single message. All other model classes support
these two.

All model objects can be serialized to JSON by a convenience method that calls into the `json` package with a special
default serializer (and sets a few other serialization options as well). Example:

    state = model.AircraftState(...)
    model.json.dumps([state, ...])

This is equivalent to:

    state = model.AircraftState(...)
    json.dumps([state, ...], default=<private serialization function>, allow_nan=False, separators=(",", ":"))
"""
