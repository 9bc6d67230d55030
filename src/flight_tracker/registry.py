from collections.abc import Callable
from typing import TYPE_CHECKING
import threading
import time

from flight_tracker.config import DEFAULT_TIMEOUT
from flight_tracker.model.aircraft import AircraftState, AircraftUpdate
from flight_tracker.model.icao_address import ICAOAddress

if TYPE_CHECKING:
    from flight_tracker.sbs.message import RawMessage


class _Shard:
    __slots__ = ("lock", "aircraft")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.aircraft: dict[ICAOAddress, AircraftState] = {}


class AircraftRegistry:
    """
    The table of currently tracked aircraft, keyed by ICAO address. Messages are merged into the registry as they
    arrive (see `upsert`), and callers read it by taking snapshots. An aircraft that hasn't been heard from for more
    than `timeout` seconds is dropped.

    Expiry is lazy: stale aircraft are removed when a snapshot is taken, when they are looked up, and when a new
    aircraft lands in the same shard, rather than by a timer. Whatever triggers it, a stale aircraft is never
    returned.

    The registry is safe to use from several threads as well as from asyncio tasks. The table is split into shards,
    each guarded by its own lock, so an update to one aircraft only ever contends with updates to the aircraft that
    hash to the same shard. Each update holds its shard's lock for its entire duration, so readers never see an
    aircraft half-way through a merge.
    """

    def __init__(
        self, timeout: float = DEFAULT_TIMEOUT, shards: int = 16, clock: Callable[[], float] = time.monotonic
    ):
        if timeout < 0:
            raise ValueError(f"timeout must not be negative: {timeout}")
        if shards < 1:
            raise ValueError(f"need at least one shard, not {shards}")
        self._timeout = timeout
        self._clock = clock
        self._shards = tuple(_Shard() for _ in range(shards))

    @property
    def timeout(self) -> float:
        return self._timeout

    def upsert(self, icao_address: ICAOAddress, update: AircraftUpdate) -> None:
        """
        Merge `update` into the state of the aircraft with address `icao_address`, creating it if necessary, and mark
        the aircraft as seen now. Only attributes present in the update are changed.
        """
        shard = self._shard(icao_address)
        with shard.lock:
            now = self._clock()
            state = shard.aircraft.get(icao_address)
            if state is None or self._is_stale(state, now):
                # Data from an aircraft's previous visit mustn't be merged into the new one.
                self._evict(shard, now)
                state = AircraftState(icao_address, first_seen=now)
                shard.aircraft[icao_address] = state
            state.merge(update)
            state.last_seen = now
            state.message_count += 1

    def apply(self, message: "RawMessage") -> None:
        self.upsert(message.icao_address, message.update)

    def get(self, icao_address: ICAOAddress) -> AircraftState | None:
        """
        Return a copy of the state of one aircraft, or None if it isn't being tracked.
        """
        shard = self._shard(icao_address)
        with shard.lock:
            now = self._clock()
            state = shard.aircraft.get(icao_address)
            if state is None:
                return None
            if self._is_stale(state, now):
                del shard.aircraft[icao_address]
                return None
            return state.copy(now)

    def snapshot(self) -> list[AircraftState]:
        """
        Return copies of the states of all tracked aircraft, in no particular order. The copies are independent of
        the registry: later updates don't change them, and changing them doesn't affect the registry.
        """
        result: list[AircraftState] = []
        for shard in self._shards:
            with shard.lock:
                now = self._clock()
                self._evict(shard, now)
                result.extend(state.copy(now) for state in shard.aircraft.values())
        return result

    def evict(self) -> int:
        """
        Remove all stale aircraft now. Returns the number removed.
        """
        evicted = 0
        for shard in self._shards:
            with shard.lock:
                evicted += self._evict(shard, self._clock())
        return evicted

    def clear(self) -> None:
        for shard in self._shards:
            with shard.lock:
                shard.aircraft = {}

    def __len__(self) -> int:
        return len(self.snapshot())

    def _shard(self, icao_address: ICAOAddress) -> _Shard:
        return self._shards[hash(icao_address) % len(self._shards)]

    def _is_stale(self, state: AircraftState, now: float) -> bool:
        return now - state.last_seen > self._timeout

    def _evict(self, shard: _Shard, now: float) -> int:
        """
        Drop the stale aircraft in `shard`. The caller must hold the shard's lock.
        """
        live = {k: v for k, v in shard.aircraft.items() if not self._is_stale(v, now)}
        evicted = len(shard.aircraft) - len(live)
        if evicted:
            # Rebuilding rather than deleting in place keeps the dict compact after heavy churn.
            shard.aircraft = live
        return evicted
