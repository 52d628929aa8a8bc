# tests/test_push_channel.py
"""WebSocket tests for /ws: identification and broadcast delivery."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from starlette.websockets import WebSocketDisconnect
from conftest import auth

ACCIDENT = {"type": "accident", "latitude": "48.8566", "longitude": "2.3522"}


class TestHandshake:
    def test_no_token_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/ws"):
                pass
        assert exc.value.code == 1008

    def test_invalid_token_is_rejected(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws?token=garbage"):
                pass

    def test_identify_ack(self, client, bob):
        user_id, token = bob
        with client.websocket_connect(f"/ws?token={token}") as ws:
            ws.send_json({"type": "identify", "userId": user_id})
            assert ws.receive_json() == {"type": "identified", "userId": user_id}

    def test_identify_as_someone_else_is_refused(self, client, alice, bob):
        with client.websocket_connect(f"/ws?token={bob[1]}") as ws:
            ws.send_json({"type": "identify", "userId": alice[0]})
            reply = ws.receive_json()
            assert reply["type"] == "error"
            assert client.app.state.registry.get(alice[0]) is None
            assert client.app.state.registry.get(bob[0]) is not None

    def test_malformed_messages_get_error_replies(self, client, bob):
        with client.websocket_connect(f"/ws?token={bob[1]}") as ws:
            ws.send_text("{not json")
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "ping"})
            assert ws.receive_json()["type"] == "error"
            ws.send_json({"type": "identify", "userId": "abc"})
            assert ws.receive_json()["type"] == "error"

    def test_disconnect_unregisters(self, client, bob):
        with client.websocket_connect(f"/ws?token={bob[1]}") as ws:
            ws.send_json({"type": "identify", "userId": bob[0]})
            ws.receive_json()
        assert client.app.state.registry.get(bob[0]) is None


class TestTrustedIdentity:
    def test_tokenless_identify_when_trusted(self, client, monkeypatch):
        monkeypatch.setattr("app.routers.push.settings.WS_TRUST_CLIENT_IDENTITY", True)
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "identify", "userId": 42})
            assert ws.receive_json() == {"type": "identified", "userId": 42}


class TestDelivery:
    def _open(self, client, user):
        ws_cm = client.websocket_connect(f"/ws?token={user[1]}")
        ws = ws_cm.__enter__()
        ws.send_json({"type": "identify", "userId": user[0]})
        assert ws.receive_json()["type"] == "identified"
        return ws_cm, ws

    def test_every_channel_receives_new_incident(self, client, alice, bob):
        alice_cm, alice_ws = self._open(client, alice)
        bob_cm, bob_ws = self._open(client, bob)
        try:
            created = client.post("/api/incidents", json=ACCIDENT, headers=auth(alice[1])).json()

            for ws in (alice_ws, bob_ws):
                event = ws.receive_json()
                assert event["type"] == "new_incident"
                assert event["incident"]["id"] == created["id"]
                assert event["incident"]["reportedBy"] == alice[0]
        finally:
            bob_cm.__exit__(None, None, None)
            alice_cm.__exit__(None, None, None)

    def test_verify_and_close_are_broadcast(self, client, alice, bob):
        created = client.post("/api/incidents", json=ACCIDENT, headers=auth(alice[1])).json()
        bob_cm, bob_ws = self._open(client, bob)
        try:
            client.post(f"/api/incidents/{created['id']}/verify", json={"isConfirmed": True},
                        headers=auth(bob[1]))
            update = bob_ws.receive_json()
            assert update["type"] == "incident_update"
            assert update["incident"]["confirmed"] == 1

            client.put(f"/api/incidents/{created['id']}/status", json={"active": False},
                       headers=auth(alice[1]))
            closed = bob_ws.receive_json()
            assert closed["type"] == "incident_status_change"
            assert closed["incident"]["active"] is False
        finally:
            bob_cm.__exit__(None, None, None)
