"""Tests for contacts router."""


def test_add_contact(client, auth_headers, user_id, other_user_id):
    r = client.post(
        "/contacts", json={"contact_id": str(other_user_id)}, headers=auth_headers(user_id)
    )
    assert r.status_code == 201
    assert r.json()["user_id"] == str(user_id)
    assert r.json()["contact_id"] == str(other_user_id)


def test_add_existing_contact_returns_it(client, auth_headers, user_id, other_user_id):
    first = client.post(
        "/contacts", json={"contact_id": str(other_user_id)}, headers=auth_headers(user_id)
    )
    again = client.post(
        "/contacts", json={"contact_id": str(other_user_id)}, headers=auth_headers(user_id)
    )
    assert again.status_code == 200
    assert again.json()["id"] == first.json()["id"]


def test_list_contacts(client, auth_headers, user_id, other_user_id):
    client.post(
        "/contacts", json={"contact_id": str(other_user_id)}, headers=auth_headers(user_id)
    )
    r = client.get("/contacts", headers=auth_headers(user_id))
    assert r.status_code == 200
    assert [c["contact_id"] for c in r.json()] == [str(other_user_id)]

    assert client.get("/contacts", headers=auth_headers(other_user_id)).json() == []


def test_cannot_add_self(client, auth_headers, user_id):
    r = client.post(
        "/contacts", json={"contact_id": str(user_id)}, headers=auth_headers(user_id)
    )
    assert r.status_code == 422


def test_contacts_require_auth(client):
    assert client.get("/contacts").status_code == 401
