"""Tests for messages and reports routers."""

from uuid import uuid4

import pytest


@pytest.fixture
def moderator_id(monkeypatch):
    moderator = uuid4()
    monkeypatch.setenv("MODERATOR_IDS", str(moderator))
    return moderator


def test_sender_deletes_message(client, auth_headers, setup_message, other_user_id):
    r = client.delete(f"/messages/{setup_message.id}", headers=auth_headers(other_user_id))
    assert r.status_code == 204

    listed = client.get(
        f"/rooms/{setup_message.room_id}/messages", headers=auth_headers(other_user_id)
    )
    assert listed.json()["items"] == []


def test_non_owner_cannot_delete(client, auth_headers, setup_message, user_id):
    r = client.delete(f"/messages/{setup_message.id}", headers=auth_headers(user_id))
    assert r.status_code == 403

    listed = client.get(
        f"/rooms/{setup_message.room_id}/messages", headers=auth_headers(user_id)
    )
    assert [m["id"] for m in listed.json()["items"]] == [str(setup_message.id)]


def test_moderator_deletes_message(client, auth_headers, setup_message, moderator_id):
    r = client.delete(f"/messages/{setup_message.id}", headers=auth_headers(moderator_id))
    assert r.status_code == 204


def test_delete_unknown_message(client, auth_headers, user_id):
    r = client.delete(f"/messages/{uuid4()}", headers=auth_headers(user_id))
    assert r.status_code == 404


def test_mark_read(client, auth_headers, setup_direct_message, user_id):
    r = client.post(f"/messages/{setup_direct_message.id}/read", headers=auth_headers(user_id))
    assert r.status_code == 200
    assert r.json()["reader_id"] == str(user_id)

    again = client.post(
        f"/messages/{setup_direct_message.id}/read", headers=auth_headers(user_id)
    )
    assert again.json()["read_at"] == r.json()["read_at"]


def test_sender_cannot_mark_read(client, auth_headers, setup_direct_message, other_user_id):
    r = client.post(
        f"/messages/{setup_direct_message.id}/read", headers=auth_headers(other_user_id)
    )
    assert r.status_code == 403


def test_report_message(client, auth_headers, setup_message, user_id):
    r = client.post(
        f"/messages/{setup_message.id}/reports",
        json={"reason": "spam"},
        headers=auth_headers(user_id),
    )
    assert r.status_code == 201
    assert r.json()["reason"] == "spam"


def test_report_own_message_forbidden(client, auth_headers, setup_message, other_user_id):
    r = client.post(
        f"/messages/{setup_message.id}/reports",
        json={},
        headers=auth_headers(other_user_id),
    )
    assert r.status_code == 403


def test_reports_require_moderator(client, auth_headers, user_id):
    assert client.get("/reports", headers=auth_headers(user_id)).status_code == 403


def test_moderator_lists_reports(client, auth_headers, setup_message, user_id, moderator_id):
    for _ in range(2):
        client.post(
            f"/messages/{setup_message.id}/reports", json={}, headers=auth_headers(user_id)
        )

    r = client.get("/reports", headers=auth_headers(moderator_id))
    assert r.status_code == 200
    assert r.json()["total"] == 2

    top = client.get("/reports/top", headers=auth_headers(moderator_id))
    assert top.json() == [{"message_id": str(setup_message.id), "reports": 2}]


def test_outsider_cannot_report_direct_message(client, auth_headers, setup_direct_message):
    r = client.post(
        f"/messages/{setup_direct_message.id}/reports",
        json={"reason": "spam"},
        headers=auth_headers(uuid4()),
    )
    assert r.status_code == 403


def test_outsider_cannot_mark_direct_message_read(client, auth_headers, setup_direct_message):
    r = client.post(
        f"/messages/{setup_direct_message.id}/read", headers=auth_headers(uuid4())
    )
    assert r.status_code == 403


def test_receiver_reports_direct_message(client, auth_headers, setup_direct_message, user_id):
    r = client.post(
        f"/messages/{setup_direct_message.id}/reports",
        json={"reason": "harassment"},
        headers=auth_headers(user_id),
    )
    assert r.status_code == 201


def test_moderator_deletes_direct_message(
    client, auth_headers, setup_direct_message, moderator_id
):
    r = client.delete(
        f"/messages/{setup_direct_message.id}", headers=auth_headers(moderator_id)
    )
    assert r.status_code == 204
