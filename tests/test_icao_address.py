import pytest

from flight_tracker.model.icao_address import ICAOAddress


def test_construction():
    assert int(ICAOAddress(" 4CA2D6 ")) == 0x4CA2D6
    assert int(ICAOAddress("1")) == 1
    assert int(ICAOAddress("4CA2D6")) == 0x4CA2D6
    assert int(ICAOAddress("4ca2d6")) == 0x4CA2D6
    assert int(ICAOAddress(0x4CA2D6)) == 0x4CA2D6
    assert int(ICAOAddress(ICAOAddress(1))) == 1
    assert int(ICAOAddress("000000")) == 0
    assert int(ICAOAddress("FFFFFF")) == ICAOAddress.MAX


@pytest.mark.parametrize(
    "value", ["", "XYZ", "1000000", "0x4CA2D6", "4C_A2D6", "+4CA2D6", "-4CA2D6", "4CA 2D6", -1, 2**24]
)
def test_invalid_values(value):
    with pytest.raises(ValueError):
        ICAOAddress(value)


@pytest.mark.parametrize("value", [1.0, None, True])
def test_invalid_types(value):
    with pytest.raises(TypeError):
        ICAOAddress(value)


def test_formatting():
    assert str(ICAOAddress(0xABC)) == "000ABC"
    assert repr(ICAOAddress("4ca2d6")) == "ICAOAddress(0x4ca2d6)"


def test_equality_and_hashing():
    a = ICAOAddress("ABC123")
    assert a == ICAOAddress(0xABC123)
    assert a == 0xABC123
    assert a != "abc123"
    assert a != "ABC123"
    assert a != 1.5
    assert len({a, ICAOAddress("abc123"), ICAOAddress(1)}) == 2
    assert {a: "x"}[ICAOAddress(0xABC123)] == "x"
    assert {a: "x"}[0xABC123] == "x"
    assert "ABC123" not in {a: "x"}


def test_ordering():
    assert sorted([ICAOAddress(3), ICAOAddress(1), ICAOAddress(2)]) == [1, 2, 3]
    assert ICAOAddress(1) <= ICAOAddress(1) < ICAOAddress(2)


def test_immutable():
    a = ICAOAddress(1)
    with pytest.raises(AttributeError):
        a._value = 2  # pylint: disable=protected-access
