import pytest

from flight_tracker import query
from flight_tracker.model.aircraft import AircraftState
from flight_tracker.model.icao_address import ICAOAddress
from flight_tracker.model.position import Position
from flight_tracker.query import OrderBy, Query
from flight_tracker.reference import Airline, AircraftRecord, ReferenceData


RECEIVER = Position(37.6191, -122.3816)


def _states() -> list[AircraftState]:
    # fmt:off
    return [
        AircraftState(ICAOAddress(1), callsign="ual1", altitude=30000, position=Position(38.0,  -122.0),
                      message_count=5),
        AircraftState(ICAOAddress(2), callsign="DAL2", altitude=10000, position=Position(37.7,  -122.4),
                      message_count=50),
        AircraftState(ICAOAddress(3), callsign="SWA3", message_count=1),
        AircraftState(ICAOAddress(4),                  altitude=20000, position=Position(37.62, -122.38)),
    ]
    # fmt:on


def test_order_by_parse():
    assert OrderBy.parse("distance:asc") == OrderBy("distance", True)
    assert OrderBy.parse(" altitude:desc ") == OrderBy("altitude", False)


@pytest.mark.parametrize(
    "text",
    ["", "distance", "distance:up", ":asc", "a:b:asc", "position:asc", "__class__:desc", "no_such_field:asc"],
)
def test_order_by_parse_errors(text):
    with pytest.raises(ValueError):
        OrderBy.parse(text)


def test_aircraft_without_callsign_are_left_out():
    result = query.apply(_states(), Query())
    assert sorted(int(a.state.icao_address) for a in result) == [1, 2, 3]

    result = query.apply(_states(), Query(callsign_only=False))
    assert len(result) == 4


def test_distance_and_direction():
    result = {int(a.state.icao_address): a for a in query.apply(_states(), Query(reference=RECEIVER))}
    assert result[2].distance == pytest.approx(RECEIVER.distance_to(Position(37.7, -122.4)))
    assert result[2].direction == pytest.approx(RECEIVER.bearing_to(Position(37.7, -122.4)))
    assert result[3].distance is None
    assert result[3].direction is None


def test_no_distance_without_reference():
    assert all(a.distance is None for a in query.apply(_states(), Query()))


def test_order_by_distance():
    result = query.apply(_states(), Query(order_by=OrderBy("distance"), reference=RECEIVER, callsign_only=False))
    assert [int(a.state.icao_address) for a in result] == [4, 2, 1]


@pytest.mark.parametrize(
    "order_by, expected",
    [
        (OrderBy("altitude", False), [1, 2]),
        (OrderBy("altitude", True), [2, 1]),
        (OrderBy("callsign"), [2, 3, 1]),
        (OrderBy("callsign", False), [1, 3, 2]),
        (OrderBy("age", False), [2, 1, 3]),
        (OrderBy("lat"), [2, 1]),
    ],
)
def test_order(order_by, expected):
    result = query.apply(_states(), Query(order_by=order_by))
    assert [int(a.state.icao_address) for a in result] == expected


@pytest.mark.parametrize("limit, expected", [(None, 3), (0, 3), (-1, 3), (1, 1), (2, 2), (10, 3)])
def test_limit(limit, expected):
    assert len(query.apply(_states(), Query(order_by=OrderBy("age"), limit=limit))) == expected


def test_reference_data():
    reference_data = ReferenceData(
        airlines=[Airline(1, "United Airlines", None, "UA", "UAL", "UNITED", "United States", True)],
        aircraft=[AircraftRecord(ICAOAddress(2), "N2", "Boeing 757-200", "B752", "Delta Air Lines")],
    )
    result = {int(a.state.icao_address): a for a in query.apply(_states(), Query(), reference_data)}
    assert result[1].airline == "United Airlines"
    assert result[1].aircraft_type is None
    assert result[2].airline == "Delta Air Lines"
    assert result[2].aircraft_type == "B752"
    assert result[3].airline == "Unknown"

    ordered = query.apply(_states(), Query(order_by=OrderBy("type")), reference_data)
    assert [int(a.state.icao_address) for a in ordered] == [2]


def test_value():
    aircraft = query.TrackedAircraft(_states()[0], airline="United", distance=12.5)
    assert aircraft.value("speed") is None
    assert aircraft.value("altitude") == 30000
    assert aircraft.value("airline") == "United"
    assert aircraft.value("distance") == 12.5
    assert aircraft.value("lng") == -122.0


@pytest.mark.parametrize("field", ["position", "icao_address", "first_seen", "state", "__class__", "value"])
def test_only_comparable_fields_can_be_ordered(field):
    with pytest.raises(ValueError):
        OrderBy(field)


@pytest.mark.parametrize("field", sorted(query.ORDERABLE_FIELDS | {"age", "type", "speed", "heading", "lat", "lng"}))
def test_every_orderable_field_sorts(field):
    states = _states()
    for i, state in enumerate(states):
        state.age_seconds = 3.0 - i
        state.ground_speed = 120.0 + i
        state.track = 90.0 * i
        state.vertical_rate = -500 * i
    reference_data = ReferenceData(aircraft=[AircraftRecord(ICAOAddress(2), "N2", None, "B752", "Delta Air Lines")])
    result = query.apply(states, Query(order_by=OrderBy(field), reference=RECEIVER, callsign_only=False), reference_data)
    assert all(a.value(field) is not None for a in result)
