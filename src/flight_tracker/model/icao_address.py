from functools import total_ordering
import re


_HEX_DIGITS = re.compile("[0-9A-Fa-f]{1,6}")


@total_ordering
class ICAOAddress:
    """
    A 24-bit address identifying an aircraft equipped with a Mode S transponder. These globally unique identifiers are
    assigned to aircraft as part of their registration certificate, and normally never change. On the time scale of a
    tracking session this makes them suitable keys for merging the partial information carried by individual
    messages. Their canonical representation is six uppercase hexadecimal digits, which is also how the SBS-1 feed
    transmits them (in its "hex ident" field).

    ICAOAddress objects are immutable.
    """

    MAX = 2**24 - 1
    MIN = 0

    __slots__ = ("_value",)

    def __init__(self, value: "str | int | ICAOAddress") -> None:
        if isinstance(value, ICAOAddress):
            value = value._value
        elif isinstance(value, str):
            digits = value.strip()
            if not _HEX_DIGITS.fullmatch(digits):
                raise ValueError(f"not an ICAO address: {value!r}")
            value = int(digits, 16)
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"can't make an ICAO address from {type(value).__name__}")
        if not ICAOAddress.MIN <= value <= ICAOAddress.MAX:
            raise ValueError(f"ICAO address out of range: {value:#x}")
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ICAOAddress is immutable")

    def __int__(self) -> int:
        return self._value

    def __eq__(self, other: object) -> bool:
        """
        ICAOAddress has equality with other ICAOAddress objects and with integers, both of which hash alike. Strings
        never compare equal; parse them with ICAOAddress(...) first.
        """
        if isinstance(other, ICAOAddress):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return False

    def __lt__(self, other: "ICAOAddress") -> bool:
        if not isinstance(other, ICAOAddress):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"ICAOAddress(0x{self._value:06x})"

    def __str__(self) -> str:
        return f"{self._value:06X}"
