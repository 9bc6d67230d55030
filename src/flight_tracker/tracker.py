from collections.abc import Callable
from enum import Enum

from flight_tracker.config import AlreadyStartedError, FeedConfig
from flight_tracker.log import log
from flight_tracker.model.aircraft import AircraftState
from flight_tracker.registry import AircraftRegistry
from flight_tracker.sbs.decoder import Decoder
from flight_tracker.sbs.reader import ConnectionState, StreamReader
from flight_tracker.util import notify_all


class ConnectionEvent(Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Tracker:
    """
    The entry point for tracking aircraft. A Tracker owns an AircraftRegistry and, while started, a StreamReader that
    feeds it from an SBS-1 service. Callers take snapshots of the registry whenever they like, and can subscribe to
    be told when the feed connects and disconnects.

        tracker = Tracker()
        tracker.subscribe(lambda event: print(event))
        tracker.start(FeedConfig("localhost", 30003))
        ...
        aircraft = tracker.snapshot()
        ...
        tracker.stop()

    `start` must be called from a coroutine or callback running on an asyncio event loop; the reader runs as a task
    on that loop.
    """

    def __init__(self, registry: AircraftRegistry | None = None, decoder: Decoder | None = None):
        self._registry = registry if registry is not None else AircraftRegistry()
        self._decoder = decoder
        self._reader: StreamReader | None = None
        self._last_reader: StreamReader | None = None
        self._listeners: list[Callable[[ConnectionEvent], None]] = []
        self._connected = False

    @property
    def registry(self) -> AircraftRegistry:
        return self._registry

    @property
    def is_connected(self) -> bool:
        return self._connected

    def start(self, config: FeedConfig) -> None:
        """
        Start tracking aircraft from the feed described by `config`. Raises ConfigurationError if the config is
        unusable, and AlreadyStartedError if the tracker is already running; in either case no connection is
        attempted.
        """
        if self._reader is not None:
            raise AlreadyStartedError("cannot start the tracker more than once")
        reader = StreamReader(config, self._registry, self._decoder)
        reader.add_listener(lambda state: self._on_state_change(reader, state))
        log(f"tracking aircraft from {config.host}:{config.port}")
        reader.start()
        self._reader = self._last_reader = reader

    def stop(self) -> None:
        """
        Stop tracking. The connection is closed, any pending reconnection is cancelled, and the registry receives no
        further updates. Safe to call when the tracker isn't running.
        """
        if self._reader is None:
            return
        log("stopping tracker")
        self._reader.stop()
        self._reader = None
        if self._connected:
            self._connected = False
            notify_all(self._listeners, ConnectionEvent.DISCONNECTED)

    async def join(self) -> None:
        """
        Wait until the reader of the current (or most recently stopped) session has finished.
        """
        if self._last_reader is not None:
            await self._last_reader.join()

    def snapshot(self) -> list[AircraftState]:
        return self._registry.snapshot()

    def subscribe(self, listener: Callable[[ConnectionEvent], None]) -> Callable[[], None]:
        """
        Call `listener` whenever the feed connects or disconnects. Returns a function that cancels the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_state_change(self, reader: StreamReader, state: ConnectionState) -> None:
        if reader is not self._reader:
            # A stopped reader reports its own teardown; stop() has already told the listeners.
            return
        match state:
            case ConnectionState.CONNECTED:
                self._connected = True
                notify_all(self._listeners, ConnectionEvent.CONNECTED)
            case ConnectionState.DISCONNECTED:
                self._connected = False
                notify_all(self._listeners, ConnectionEvent.DISCONNECTED)
