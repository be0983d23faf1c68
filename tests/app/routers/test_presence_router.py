"""Tests for presence router."""

from uuid import uuid4


def _channel():
    return f"room-{uuid4().hex[:8]}"


def test_join_returns_snapshot(client, auth_headers, user_id, other_user_id):
    channel = _channel()
    client.post(f"/presence/{channel}/join", headers=auth_headers(other_user_id))
    r = client.post(f"/presence/{channel}/join", headers=auth_headers(user_id))
    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 2
    assert set(data["users"]) == {str(user_id), str(other_user_id)}


def test_leave_removes_user(client, auth_headers, user_id):
    channel = _channel()
    client.post(f"/presence/{channel}/join", headers=auth_headers(user_id))
    r = client.post(f"/presence/{channel}/leave", headers=auth_headers(user_id))
    assert r.status_code == 204
    snapshot = client.get(f"/presence/{channel}", headers=auth_headers(user_id)).json()
    assert snapshot["users"] == []


def test_heartbeat_joins_unknown_user(client, auth_headers, user_id):
    channel = _channel()
    r = client.post(f"/presence/{channel}/heartbeat", headers=auth_headers(user_id))
    assert r.status_code == 204
    snapshot = client.get(f"/presence/{channel}", headers=auth_headers(user_id)).json()
    assert snapshot["users"] == [str(user_id)]


def test_invalid_channel_name(client, auth_headers, user_id):
    r = client.post("/presence/bad channel!/join", headers=auth_headers(user_id))
    assert r.status_code == 422
