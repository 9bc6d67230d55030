"""
A websocket server that lets a display follow the tracker. Messages in both directions are JSON objects with a
"type" member.

Requests from the client:

    {"type": "GET_AIRCRAFT", "orderBy": "distance:asc", "limit": 5, "latLng": [37.6, -122.4]}
        All members other than "type" are optional and fall back to the server's defaults. The query is remembered
        for the client and used for every subsequent push.
    {"type": "GET_IS_CONNECTED"}

Messages from the server:

    {"type": "SET_AIRCRAFT", "aircraft": [...]}      in reply to GET_AIRCRAFT, and pushed every second
    {"type": "SET_IS_CONNECTED", "connected": true}  in reply to GET_IS_CONNECTED, and pushed on every change
    {"type": "ERROR", "error": "..."}                in reply to a request that can't be understood
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import replace
import json
from typing import Any

import websockets
from websockets.asyncio.server import serve, ServerConnection, Server as WebsocketsServer

from flight_tracker import query
from flight_tracker.log import log
from flight_tracker.model.json import dumps
from flight_tracker.model.position import Position
from flight_tracker.reference import ReferenceData
from flight_tracker.runnable import Runnable
from flight_tracker.tracker import Tracker


class Client:
    def __init__(self, ws: ServerConnection, default_query: query.Query):
        self.ws = ws
        self.query = default_query


class Server(Runnable):
    def __init__(  # pylint: disable=too-many-arguments
        self,
        listen_host: str,
        listen_port: int,
        tracker: Tracker,
        default_query: query.Query | None = None,
        reference_data: ReferenceData | None = None,
        push_interval: float = 1,
    ):
        super().__init__()
        self._listen_host = listen_host
        self._listen_port = listen_port
        self._tracker = tracker
        self._default_query = default_query if default_query is not None else query.Query()
        self._reference_data = reference_data
        self._push_interval = push_interval
        self._server: WebsocketsServer | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._clients: list[Client] = []
        self._connection_changed = asyncio.Event()
        self._unsubscribe = tracker.subscribe(lambda _: self._connection_changed.set())

    async def setup(self) -> None:
        self._serve_task = asyncio.create_task(self._serve())

    async def step(self) -> None:
        if self._serve_task is not None and self._serve_task.done():
            # The listener has died, e.g. because the port is taken. Raise whatever killed it.
            self._serve_task.result()
            raise RuntimeError("websocket listener stopped unexpectedly")

        # Wait for the feed to connect or disconnect, or for the push interval to pass, whichever comes first.
        try:
            async with asyncio.timeout(self._push_interval):
                await self._connection_changed.wait()
        except TimeoutError:
            pass

        if self._connection_changed.is_set():
            self._connection_changed.clear()
            await self._broadcast(lambda _: self._is_connected_message())

        await self._broadcast(self._aircraft_message)

    async def teardown(self) -> None:
        self._unsubscribe()
        if self._server is not None:
            self._server.close()
        elif self._serve_task is not None:
            self._serve_task.cancel()
        if self._serve_task is not None:
            await asyncio.wait([self._serve_task])

    def handle_request(self, client: Client, raw: str | bytes) -> str:
        """
        Produce the reply to one message received from `client`.
        """
        try:
            request = json.loads(raw)
        except ValueError as exc:
            return _error(f"invalid JSON: {exc}")
        if not isinstance(request, dict):
            return _error("request must be a JSON object")

        match request.get("type"):
            case "GET_AIRCRAFT":
                try:
                    client.query = self._query_from(request)
                except (TypeError, ValueError) as exc:
                    return _error(str(exc))
                return self._aircraft_message(client)
            case "GET_IS_CONNECTED":
                return self._is_connected_message()
            case other:
                return _error(f"unknown request type {other!r}")

    def _query_from(self, request: dict[str, Any]) -> query.Query:
        result = self._default_query
        if "orderBy" in request:
            order_by = request["orderBy"]
            if order_by is not None and not isinstance(order_by, str):
                raise ValueError(f"orderBy must be a string, not {order_by!r}")
            result = replace(result, order_by=query.OrderBy.parse(order_by) if order_by is not None else None)
        if "limit" in request:
            limit = request["limit"]
            if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
                raise ValueError(f"limit must be an integer, not {limit!r}")
            result = replace(result, limit=limit)
        if "latLng" in request:
            lat_lng = request["latLng"]
            if lat_lng is None:
                result = replace(result, reference=None)
            elif isinstance(lat_lng, list) and len(lat_lng) == 2:
                result = replace(result, reference=Position(float(lat_lng[0]), float(lat_lng[1])))
            else:
                raise ValueError(f"latLng must be a [latitude, longitude] pair, not {lat_lng!r}")
        return result

    def _aircraft_message(self, client: Client) -> str:
        aircraft = query.apply(self._tracker.snapshot(), client.query, self._reference_data)
        return dumps({"type": "SET_AIRCRAFT", "aircraft": aircraft})

    def _is_connected_message(self) -> str:
        return dumps({"type": "SET_IS_CONNECTED", "connected": self._tracker.is_connected})

    async def _broadcast(self, message_for: Callable[[Client], str]) -> None:
        futures: list[Awaitable[None]] = []
        for client in list(self._clients):
            futures.append(client.ws.send(message_for(client)))
        results = await asyncio.gather(*futures, return_exceptions=True)
        for result in results:
            if isinstance(result, websockets.WebSocketException):
                log(f"websocket exception: {result}")
            elif isinstance(result, BaseException):
                raise result

    async def _serve(self) -> None:
        async with serve(self._handler, self._listen_host, self._listen_port) as server:
            log(f"listening on {self._listen_host}:{self._listen_port}")
            self._server = server
            await server.wait_closed()
        log("stopped listening")

    async def _handler(self, ws: ServerConnection) -> None:
        log(f"{ws.remote_address[0]}:{ws.remote_address[1]}: connection established")
        client = Client(ws, self._default_query)
        self._clients.append(client)
        try:
            async for raw in ws:
                await ws.send(self.handle_request(client, raw))
        except websockets.ConnectionClosedError as exc:
            log(f"{ws.remote_address[0]}:{ws.remote_address[1]}: {exc}")
        finally:
            self._clients.remove(client)
        log(f"{ws.remote_address[0]}:{ws.remote_address[1]}: connection closed")


def _error(error: str) -> str:
    return dumps({"type": "ERROR", "error": error})
