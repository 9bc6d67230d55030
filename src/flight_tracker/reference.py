"""
Static reference tables used to describe tracked aircraft: who operates them and what type they are.

The tables are read from two CSV files without header rows:

    airlines.csv    id, name, alias, IATA code, ICAO code, callsign, country, active ("Y" or "N")
                    (the OpenFlights airline database; missing values are written as \\N)
    aircrafts.csv   ICAO address, registration, model, ICAO type designator, operator
                    (missing values are empty)
"""

from collections.abc import Callable, Iterable
import csv
from dataclasses import dataclass
import os
from typing import Self, TypeVar

from flight_tracker.log import log
from flight_tracker.model.aircraft import AircraftState
from flight_tracker.model.icao_address import ICAOAddress

T = TypeVar("T")


AIRLINES_FILE = "airlines.csv"
AIRCRAFT_FILE = "aircrafts.csv"


@dataclass(frozen=True)
class Airline:
    id: int | None
    name: str | None
    alias: str | None
    iata: str | None
    icao: str | None
    callsign: str | None
    country: str | None
    active: bool

    @classmethod
    def from_row(cls, row: list[str]) -> Self:
        values = [None if value == "\\N" else value for value in (row + [""] * 8)[:8]]
        return cls(
            id=int(values[0]) if values[0] else None,
            name=values[1] or None,
            alias=values[2] or None,
            iata=values[3] or None,
            icao=values[4] or None,
            callsign=values[5] or None,
            country=values[6] or None,
            active=values[7] == "Y",
        )


@dataclass(frozen=True)
class AircraftRecord:
    icao_address: ICAOAddress
    registration: str | None
    model: str | None
    type: str | None
    operator: str | None

    @classmethod
    def from_row(cls, row: list[str]) -> Self:
        values = [value.strip() or None for value in (row + [""] * 5)[:5]]
        if values[0] is None:
            raise ValueError("missing ICAO address")
        return cls(ICAOAddress(values[0]), values[1], values[2], values[3], values[4])


class ReferenceData:
    def __init__(self, airlines: Iterable[Airline] = (), aircraft: Iterable[AircraftRecord] = ()):
        self._airlines: dict[str, Airline] = {}
        for airline in airlines:
            # The first airline listed for a code wins, as later entries are usually defunct duplicates.
            if airline.icao is not None:
                self._airlines.setdefault(airline.icao.upper(), airline)
        self._aircraft = {record.icao_address: record for record in aircraft}

    @classmethod
    def load(cls, directory: str) -> Self:
        """
        Load the reference tables from `directory`. A missing or unreadable table is logged and treated as empty, so
        that tracking works (with less descriptive output) without reference data.
        """
        airlines = _read(os.path.join(directory, AIRLINES_FILE), Airline.from_row)
        aircraft = _read(os.path.join(directory, AIRCRAFT_FILE), AircraftRecord.from_row)
        log(f"loaded {len(airlines)} airlines and {len(aircraft)} aircraft from {directory}")
        return cls(airlines, aircraft)

    def airline_for(self, callsign: str | None) -> Airline | None:
        """
        Airline callsigns start with the airline's three-letter ICAO code, e.g. "UAL123" for United.
        """
        if not callsign or len(callsign) < 3:
            return None
        return self._airlines.get(callsign[:3].upper())

    def aircraft_for(self, icao_address: ICAOAddress) -> AircraftRecord | None:
        return self._aircraft.get(icao_address)

    def airline_name(self, state: AircraftState) -> str:
        """
        A display name for whoever operates the aircraft: the registered operator if known, otherwise the airline
        implied by the callsign (marked with "*" if the airline is no longer active), otherwise "Unknown".
        """
        record = self.aircraft_for(state.icao_address)
        if record is not None and record.operator:
            return record.operator

        airline = self.airline_for(state.callsign)
        if airline is None:
            return "Unknown"
        name = airline.alias or airline.name or "Unknown"
        return name if airline.active else name + "*"

    def aircraft_type(self, state: AircraftState) -> str | None:
        record = self.aircraft_for(state.icao_address)
        return record.type if record is not None else None


def _read(path: str, parse: Callable[[list[str]], T]) -> list[T]:
    result: list[T] = []
    try:
        with open(path, newline="", encoding="utf-8") as f:
            for lineno, row in enumerate(csv.reader(f), start=1):
                if not row:
                    continue
                try:
                    result.append(parse(row))
                except ValueError as exc:
                    log(f"{path}:{lineno}: skipping row: {exc}")
    except OSError as exc:
        log(f"can't read {path}: {exc}")
    return result
