import asyncio

from fastapi import WebSocketDisconnect

from fakes import RecordingConnection, sign_up_and_in
from matchmaking.routers.live import live_connection
from matchmaking.services.auth_service import create_user_token
from matchmaking.services.connection_registry import ConnectionRegistry, connection_registry


def test_notify_without_connection_is_a_noop():
    registry = ConnectionRegistry()

    assert asyncio.run(registry.notify("u1", {"type": "ping"})) is False


def test_notify_delivers_to_registered_connection():
    registry = ConnectionRegistry()
    connection = RecordingConnection()
    registry.register("u1", connection)

    assert asyncio.run(registry.notify("u1", {"type": "ping"})) is True
    assert connection.sent == [{"type": "ping"}]


def test_failed_send_drops_connection():
    registry = ConnectionRegistry()
    registry.register("u1", RecordingConnection(fail=True))

    assert asyncio.run(registry.notify("u1", {"type": "ping"})) is False
    assert registry.get("u1") is None


def test_stale_unregister_keeps_newer_connection():
    registry = ConnectionRegistry()
    old, new = RecordingConnection(), RecordingConnection()
    registry.register("u1", old)
    registry.register("u1", new)

    registry.unregister("u1", old)

    assert registry.get("u1") is new
    registry.unregister("u1")
    assert len(registry) == 0


def test_websocket_registers_authenticated_user(client):
    token, user = sign_up_and_in(client)

    with client.websocket_connect(f"/ws?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "connected", "userId": user["user_id"]}
        assert connection_registry.get(user["user_id"]) is not None


def test_websocket_receives_approval_event(client):
    token, user = sign_up_and_in(client)
    created = client.post(
        "/applications",
        json={"birthday": "01/01/2000", "city": "York"},
        headers={"Authorization": f"Bearer {token}"},
    ).json()["data"]
    client.post("/admin/create", json={"username": "root", "password": "pw"})
    admin = client.post("/admin/login", json={"username": "root", "password": "pw"}).json()["data"]["access_token"]

    with client.websocket_connect(f"/ws?token={token}") as websocket:
        websocket.receive_json()
        client.put(
            f"/admin/applications/{created['application_id']}/approval",
            json={"approved": True},
            headers={"Authorization": f"Bearer {admin}"},
        )
        event = websocket.receive_json()

    assert event["type"] == "application_approved"
    assert event["userId"] == user["user_id"]


class _ScriptedWebSocket:
    """Stands in for a Starlette WebSocket; disconnects on the first read."""

    def __init__(self, registry, user_id):
        self.registry = registry
        self.user_id = user_id
        self.registered_before_accept = None
        self.sent = []

    async def accept(self):
        self.registered_before_accept = self.registry.get(self.user_id) is not None

    async def send_json(self, data):
        self.sent.append(data)

    async def receive_text(self):
        raise WebSocketDisconnect(code=1000)

    async def close(self, code=1000):
        raise AssertionError(f"unexpected close {code}")


def test_live_connection_accepts_before_registering():
    token = create_user_token("u1")
    websocket = _ScriptedWebSocket(connection_registry, "u1")

    asyncio.run(live_connection(websocket, token=token))

    assert websocket.registered_before_accept is False
    assert websocket.sent == [{"type": "connected", "userId": "u1"}]
    assert connection_registry.get("u1") is None
