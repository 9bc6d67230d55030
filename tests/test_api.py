import asyncio
import json

import pytest
from websockets.asyncio.client import connect

from feed_server import IDENTIFICATION, FeedServer, unused_port, wait_for
from flight_tracker import api, query
from flight_tracker.config import FeedConfig
from flight_tracker.model.aircraft import AircraftUpdate
from flight_tracker.model.icao_address import ICAOAddress
from flight_tracker.model.position import Position
from flight_tracker.registry import AircraftRegistry
from flight_tracker.tracker import Tracker


def _tracker() -> Tracker:
    registry = AircraftRegistry()
    registry.upsert(ICAOAddress(1), AircraftUpdate(callsign="UAL1", altitude=30000, position=Position(38.0, -122.0)))
    registry.upsert(ICAOAddress(2), AircraftUpdate(callsign="DAL2", altitude=10000, position=Position(37.7, -122.4)))
    registry.upsert(ICAOAddress(3), AircraftUpdate(altitude=20000))
    return Tracker(registry)


def _request(server: api.Server, client: api.Client, request: object) -> dict:
    return json.loads(server.handle_request(client, json.dumps(request)))


@pytest.fixture(name="server")
def fixture_server():
    return api.Server("127.0.0.1", 0, _tracker())


@pytest.fixture(name="client")
def fixture_client():
    return api.Client(None, query.Query())  # type: ignore


def test_get_aircraft(server, client):
    reply = _request(server, client, {"type": "GET_AIRCRAFT"})
    assert reply["type"] == "SET_AIRCRAFT"
    assert sorted(a["callsign"] for a in reply["aircraft"]) == ["DAL2", "UAL1"]


def test_get_aircraft_with_query(server, client):
    reply = _request(server, client, {"type": "GET_AIRCRAFT", "orderBy": "altitude:desc", "limit": 1})
    assert [a["icao_address"] for a in reply["aircraft"]] == ["000001"]
    # The query sticks to the client.
    assert client.query.order_by == query.OrderBy("altitude", False)
    assert client.query.limit == 1

    # Each request starts over from the server's defaults, so the limit no longer applies.
    request = {"type": "GET_AIRCRAFT", "latLng": [37.6191, -122.3816], "orderBy": "distance:asc"}
    reply = _request(server, client, request)
    assert [a["icao_address"] for a in reply["aircraft"]] == ["000002", "000001"]
    assert all("distance" in a and "direction" in a for a in reply["aircraft"])
    assert client.query.limit is None

    reply = _request(server, client, {"type": "GET_AIRCRAFT", "limit": None, "orderBy": None, "latLng": None})
    assert len(reply["aircraft"]) == 2
    assert all("distance" not in a for a in reply["aircraft"])


def test_get_is_connected(server, client):
    assert _request(server, client, {"type": "GET_IS_CONNECTED"}) == {"type": "SET_IS_CONNECTED", "connected": False}


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '{"type": "SELF_DESTRUCT"}',
        "{}",
        '{"type": "GET_AIRCRAFT", "orderBy": "sideways"}',
        '{"type": "GET_AIRCRAFT", "orderBy": 5}',
        '{"type": "GET_AIRCRAFT", "orderBy": "position:asc"}',
        '{"type": "GET_AIRCRAFT", "orderBy": "__class__:desc"}',
        '{"type": "GET_AIRCRAFT", "limit": "ten"}',
        '{"type": "GET_AIRCRAFT", "limit": true}',
        '{"type": "GET_AIRCRAFT", "latLng": [1]}',
        '{"type": "GET_AIRCRAFT", "latLng": [91, 0]}',
        '{"type": "GET_AIRCRAFT", "latLng": ["north", "west"]}',
        '{"type": "GET_AIRCRAFT", "latLng": [null, 0]}',
    ],
)
def test_bad_requests(server, client, raw):
    reply = json.loads(server.handle_request(client, raw))
    assert reply["type"] == "ERROR"
    assert reply["error"]
    assert client.query == query.Query()


def test_pushes_to_connected_clients():
    async def scenario() -> None:
        tracker = Tracker()
        port = await unused_port()
        server = api.Server("127.0.0.1", port, tracker, push_interval=0.05)
        server.start()

        async with FeedServer((IDENTIFICATION,)) as feed:
            async with asyncio.timeout(5):
                while True:
                    try:
                        ws = await connect(f"ws://127.0.0.1:{port}")
                        break
                    except OSError:
                        await asyncio.sleep(0.01)

            async with ws:
                await ws.send(json.dumps({"type": "GET_IS_CONNECTED"}))
                connected: list[bool] = []
                aircraft: list[list[dict]] = []

                async def receive() -> None:
                    async for raw in ws:
                        message = json.loads(raw)
                        if message["type"] == "SET_IS_CONNECTED":
                            connected.append(message["connected"])
                        elif message["type"] == "SET_AIRCRAFT":
                            aircraft.append(message["aircraft"])

                receiving = asyncio.create_task(receive())
                await wait_for(lambda: connected == [False] and len(aircraft) >= 1)

                tracker.start(FeedConfig("127.0.0.1", feed.port))
                await wait_for(lambda: connected == [False, True] and any(aircraft[-1:]))
                assert aircraft[-1][0]["callsign"] == "UAL123"

                tracker.stop()
                await wait_for(lambda: connected == [False, True, False])
                await tracker.join()

                server.stop()
                await server.join()
                await asyncio.wait([receiving], timeout=5)
                assert receiving.done()

    asyncio.run(scenario())
