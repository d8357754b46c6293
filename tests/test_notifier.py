"""
Live update relay tests.
"""
import asyncio

from app.notifier import NotificationRelay


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)


def test_broadcast_reaches_all_but_excluded():
    relay = NotificationRelay()
    first, second = FakeSocket(), FakeSocket()

    async def scenario():
        first_id = await relay.connect(first)
        await relay.connect(second)
        await relay.broadcast("taskUpdated", {"id": "t1"}, exclude=first_id)

    asyncio.run(scenario())

    assert first.accepted and second.accepted
    assert first.sent == []
    assert second.sent[0]["event"] == "taskUpdated"
    assert second.sent[0]["data"] == {"id": "t1"}


def test_failed_client_is_dropped_without_raising():
    relay = NotificationRelay()
    broken, healthy = FakeSocket(fail=True), FakeSocket()

    async def scenario():
        await relay.connect(broken)
        await relay.connect(healthy)
        await relay.broadcast("projectDeleted", {"id": "p1"})

    asyncio.run(scenario())

    assert relay.connection_count == 1
    assert healthy.sent[0]["event"] == "projectDeleted"


def test_client_updates_are_renamed_and_unknown_ignored():
    relay = NotificationRelay()
    sender, listener = FakeSocket(), FakeSocket()

    async def scenario():
        sender_id = await relay.connect(sender)
        await relay.connect(listener)
        await relay.handle_client_message(sender_id, {"event": "projectUpdate", "data": {"id": "p1"}})
        await relay.handle_client_message(sender_id, {"event": "somethingElse", "data": {}})

    asyncio.run(scenario())

    assert sender.sent == []
    assert [m["event"] for m in listener.sent] == ["projectUpdated"]


def test_websocket_clients_are_tracked(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.send_json({"event": "taskUpdate", "data": {"id": "t1"}})
        health = client.get("/health")

    assert health.status_code == 200
    assert health.json()["live_clients"] == 1
