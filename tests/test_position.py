import pytest

from flight_tracker.model.position import Position


SFO = Position(37.6191, -122.3816)
OAK = Position(37.7213, -122.2208)


@pytest.mark.parametrize("latitude, longitude", [(90.5, 0), (-91, 0), (0, 180.1), (0, -181)])
def test_out_of_range(latitude, longitude):
    with pytest.raises(ValueError):
        Position(latitude, longitude)


def test_distance():
    assert SFO.distance_to(SFO) == 0
    # About 18 km across the bay.
    assert SFO.distance_to(OAK) == pytest.approx(18_300, rel=0.02)
    assert OAK.distance_to(SFO) == pytest.approx(SFO.distance_to(OAK))
    # A quarter of the way around the equator.
    assert Position(0, 0).distance_to(Position(0, 90)) == pytest.approx(10_007_543, rel=1e-4)


@pytest.mark.parametrize(
    "destination, bearing",
    [
        (Position(1, 0), 0),
        (Position(0, 1), 90),
        (Position(-1, 0), 180),
        (Position(0, -1), 270),
    ],
)
def test_bearing(destination, bearing):
    assert Position(0, 0).bearing_to(destination) == pytest.approx(bearing)


def test_bearing_is_never_negative():
    assert 0 <= OAK.bearing_to(SFO) < 360
    assert OAK.bearing_to(SFO) == pytest.approx(231, abs=2)
