"""Tests for the notification preference endpoints."""

from __future__ import annotations


def test_preferences_require_authentication(client) -> None:
    assert client.get("/preferences/").status_code == 401
    assert client.post("/preferences/", json={"prefs": {"mail": {"comment": False}}}).status_code == 401


def test_defaults_are_all_enabled(client, make_user, auth_headers) -> None:
    user = make_user()

    response = client.get("/preferences/", headers=auth_headers(user))

    assert response.status_code == 200
    payload = response.json()
    assert set(payload) == {"mail", "chat"}
    assert all(payload["mail"].values())
    assert all(payload["chat"].values())
    assert "deadline" in payload["chat"]


def test_update_and_read_back(client, make_user, auth_headers) -> None:
    user = make_user()

    response = client.post(
        "/preferences/",
        json={"prefs": {"mail": {"comment": False}, "chat": {"deadline": False}}},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    stored = client.get("/preferences/", headers=auth_headers(user)).json()
    assert stored["mail"]["comment"] is False
    assert stored["chat"]["deadline"] is False
    assert stored["mail"]["deadline"] is True


def test_update_rejects_unknown_category(client, make_user, auth_headers) -> None:
    user = make_user()

    response = client.post(
        "/preferences/",
        json={"prefs": {"mail": {"weather": False}}},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert "weather" in response.json()["detail"]
