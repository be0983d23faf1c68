"""Tests for moods router."""


def test_check_in_and_current(client, auth_headers, user_id):
    assert client.get("/moods/current", headers=auth_headers(user_id)).status_code == 404

    r = client.post("/moods/checkins", json={"mood": "lonely"}, headers=auth_headers(user_id))
    assert r.status_code == 201

    current = client.get("/moods/current", headers=auth_headers(user_id))
    assert current.json()["mood"] == "lonely"


def test_unknown_mood(client, auth_headers, user_id):
    r = client.post("/moods/checkins", json={"mood": "grumpy"}, headers=auth_headers(user_id))
    assert r.status_code == 422


def test_matches(client, auth_headers, user_id, other_user_id):
    client.post("/moods/checkins", json={"mood": "tired"}, headers=auth_headers(user_id))
    client.post("/moods/checkins", json={"mood": "tired"}, headers=auth_headers(other_user_id))

    r = client.get("/moods/matches", headers=auth_headers(user_id))
    assert [m["user_id"] for m in r.json()] == [str(other_user_id)]

    active = client.get("/moods/active", headers=auth_headers(user_id))
    assert len(active.json()) == 2
