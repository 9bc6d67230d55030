import asyncio
from collections.abc import Callable
from enum import Enum

from flight_tracker.config import FeedConfig
from flight_tracker.log import log
from flight_tracker.registry import AircraftRegistry
from flight_tracker.runnable import Runnable
from flight_tracker.sbs.decoder import Decoder
from flight_tracker.util import notify_all


MAX_RECONNECT_DELAY = 30


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def reconnect_delay(attempts: int) -> int:
    """
    Seconds to wait before reconnecting after `attempts` consecutive failures: the square of the number of failures,
    capped at MAX_RECONNECT_DELAY.
    """
    return min(attempts**2, MAX_RECONNECT_DELAY)


class StreamReader(Runnable):
    """
    The stream reader makes a TCP connection to a service that provides SBS-1 traffic (dump1090 on port 30003, or
    anything relaying it), splits that traffic into lines, hands each line to a decoder, and merges each decoded message
    into an AircraftRegistry.

    If the reader is unable to connect, or the connection is closed, it retries the connection indefinitely, waiting a
    little longer after each consecutive failure (see `reconnect_delay`). Errors that don't close the connection, such
    as a line too long to buffer or bytes that aren't UTF-8, are logged and reading carries on.

    Every change of connection state is reported to the `on_state_change` callback and to any listener added with
    `add_listener`.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        config: FeedConfig,
        registry: AircraftRegistry,
        decoder: Decoder | None = None,
        on_state_change: Callable[[ConnectionState], None] | None = None,
        *,
        connect_timeout: float = 10,
        line_limit: int = 2**16,
    ):
        config.validate()
        super().__init__()
        self._host = config.host
        self._port = config.port
        self._registry = registry
        self._decoder = decoder if decoder is not None else Decoder()
        self._listeners: list[Callable[[ConnectionState], None]] = []
        if on_state_change is not None:
            self._listeners.append(on_state_change)
        self._connect_timeout = connect_timeout
        self._line_limit = line_limit
        self._state = ConnectionState.DISCONNECTED
        self._attempts = 0
        self._errors_seen: set[str] = set()
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempts(self) -> int:
        """
        The number of consecutive failures since the last successful connection.
        """
        return self._attempts

    def add_listener(self, listener: Callable[[ConnectionState], None]) -> None:
        self._listeners.append(listener)

    async def step(self) -> None:
        if self._reader is None:
            await self._connect()
            return

        try:
            line = await self._reader.readline()
        except ValueError as exc:
            # The line didn't fit in the buffer. The stream discards it, so the connection is still usable.
            self._report(f"read error on stream to {self._host}:{self._port}", exc)
            return
        except OSError as exc:
            # Streams only report transport errors once the connection has been lost, so this is a closure.
            self._report(f"read error on stream to {self._host}:{self._port}", exc)
            line = b""

        if not line:
            log(f"stream to {self._host}:{self._port} has been closed")
            await self._disconnected()
            return

        self._feed(line)

    async def teardown(self) -> None:
        self._close()
        self._set_state(ConnectionState.DISCONNECTED)

    async def _connect(self) -> None:
        self._set_state(ConnectionState.CONNECTING)
        log(f"connecting to {self._host}:{self._port}")
        try:
            async with asyncio.timeout(self._connect_timeout):
                self._reader, self._writer = await asyncio.open_connection(
                    self._host, self._port, limit=self._line_limit
                )
        except OSError as exc:
            # This includes refused connections, failed name lookups and timeouts.
            log(f"failed to open stream to {self._host}:{self._port}: {str(exc) or type(exc).__name__}")
            await self._disconnected()
            return

        self._attempts = 0
        log(f"successfully opened stream to {self._host}:{self._port}; waiting for data")
        self._set_state(ConnectionState.CONNECTED)

    async def _disconnected(self) -> None:
        self._close()
        self._set_state(ConnectionState.DISCONNECTED)
        delay = reconnect_delay(self._attempts)
        self._attempts += 1
        log(f"retrying to open stream to {self._host}:{self._port} in {delay} seconds")
        await asyncio.sleep(delay)

    def _feed(self, line: bytes) -> None:
        try:
            text = line.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            self._report(f"not UTF-8: {line!r}", exc)
            return

        if not text or not self.is_running():
            return
        message = self._decoder.decode(text)
        if message is not None:
            self._registry.apply(message)

    def _close(self) -> None:
        if self._writer is not None:
            self._writer.close()
        self._reader = None
        self._writer = None

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        self._state = state
        notify_all(self._listeners, state)

    def _report(self, context: str, exc: Exception) -> None:
        error = f"{type(exc).__name__}: {exc}"
        if error not in self._errors_seen:
            log(f"{context}: {error} (future errors of this kind will be suppressed)")
            self._errors_seen.add(error)
