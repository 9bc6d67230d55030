"""
Configuration for the tracker service, and the exceptions raised when it is wrong.

The feed connection is described by a FeedConfig. The service as a whole (`python -m flight_tracker`) is configured
through environment variables, collected into a Settings object by `Settings.from_env`:

    FEED_HOST          host name or address of the SBS-1/BaseStation feed (required)
    FEED_PORT          TCP port of the feed (default 30003)
    AIRCRAFT_TIMEOUT   seconds without a message after which an aircraft is dropped (default 30)
    API_HOST           address the websocket API listens on (default: all interfaces)
    API_PORT           port the websocket API listens on (default 9999)
    RECEIVER_LAT       latitude of the reference point used for distance and direction (optional)
    RECEIVER_LON       longitude of the reference point (optional, required if RECEIVER_LAT is set)
    ORDER_BY           default ordering of aircraft lists, "<field>:asc" or "<field>:desc" (optional)
    LIMIT              default maximum length of aircraft lists (optional)
    REFERENCE_DIR      directory holding airlines.csv and aircrafts.csv (optional)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

from flight_tracker.log import log
from flight_tracker.model.position import Position
from flight_tracker.query import OrderBy


DEFAULT_FEED_PORT = 30003
DEFAULT_TIMEOUT = 30.0
DEFAULT_API_PORT = 9999


class ConfigurationError(ValueError):
    """
    Exception raised when the tracker is given configuration it can't work with. This is always raised synchronously,
    before any connection is attempted.
    """


class AlreadyStartedError(RuntimeError):
    """
    Exception raised when something that may only be started once is started again.
    """


@dataclass(frozen=True)
class FeedConfig:
    """
    Where to find the SBS-1/BaseStation feed.
    """

    host: str | None
    port: int | None = DEFAULT_FEED_PORT

    def validate(self) -> None:
        if not self.host or not isinstance(self.host, str):
            raise ConfigurationError("the host (IP or hostname) of the feed is required")
        if self.port is None:
            raise ConfigurationError("the port of the feed is required")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"the port of the feed must be an integer, not {self.port!r}")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"the port of the feed is out of range: {self.port}")


@dataclass(frozen=True)
class Settings:
    feed: FeedConfig
    timeout: float = DEFAULT_TIMEOUT
    api_host: str = ""
    api_port: int = DEFAULT_API_PORT
    receiver_position: Position | None = None
    order_by: OrderBy | None = None
    limit: int | None = None
    reference_dir: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> Self:
        try:
            host = environ["FEED_HOST"]
        except KeyError as exc:
            raise ConfigurationError(f"{exc.args[0]} not set; don't know where to find the feed") from exc

        feed = FeedConfig(host, _parse(environ, "FEED_PORT", int, DEFAULT_FEED_PORT))
        feed.validate()

        timeout = _parse(environ, "AIRCRAFT_TIMEOUT", float, DEFAULT_TIMEOUT)
        if timeout < 0:
            raise ConfigurationError(f"AIRCRAFT_TIMEOUT must not be negative: {timeout}")

        receiver_position = None
        latitude = _parse(environ, "RECEIVER_LAT", float, None)
        longitude = _parse(environ, "RECEIVER_LON", float, None)
        if (latitude is None) != (longitude is None):
            raise ConfigurationError("RECEIVER_LAT and RECEIVER_LON must be set together")
        if latitude is not None and longitude is not None:
            try:
                receiver_position = Position(latitude, longitude)
            except ValueError as exc:
                raise ConfigurationError(f"invalid receiver position: {exc}") from exc

        order_by = _order_by(environ.get("ORDER_BY", "").strip(), receiver_position)

        return cls(
            feed=feed,
            timeout=timeout,
            api_host=environ.get("API_HOST", ""),
            api_port=_parse(environ, "API_PORT", int, DEFAULT_API_PORT),
            receiver_position=receiver_position,
            order_by=order_by,
            limit=_parse(environ, "LIMIT", int, None),
            reference_dir=environ.get("REFERENCE_DIR") or None,
        )


def _parse(environ: Mapping[str, str], name: str, kind: type, default: Any) -> Any:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} is not a valid {kind.__name__}: {raw!r}") from exc


def _order_by(raw: str, receiver_position: Position | None) -> OrderBy | None:
    if not raw:
        return None
    try:
        order_by = OrderBy.parse(raw)
    except ValueError as exc:
        log(f"ORDER_BY will be ignored: {exc}")
        return None
    if order_by.field == "distance" and receiver_position is None:
        log("ORDER_BY is by distance but RECEIVER_LAT/RECEIVER_LON are not set, so no aircraft will be listed")
    return order_by
