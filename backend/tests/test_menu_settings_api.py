from __future__ import annotations

from datetime import timedelta
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from backend.app import app
from backend.core import security
from backend.core.storage import MenuRegistryStore
from backend.services import menu_initializer
from backend.tests.auth_helpers import login_headers
from backend.tests.store_helpers import UnreachableCollection


@pytest.fixture()
def client(store: MenuRegistryStore) -> Iterator[TestClient]:
    menu_initializer.initialize_registry(store)
    app.state.menu_store = store
    try:
        yield TestClient(app)
    finally:
        app.state.menu_store = None


def _navigation_ids(response) -> set[str]:
    return {entry["menuId"] for group in response.json() for entry in group["items"]}


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_navigation_requires_a_token(client: TestClient) -> None:
    assert client.get("/menu-settings/navigation").status_code == 401


def test_navigation_rejects_expired_token(client: TestClient) -> None:
    token = security.create_access_token("alice", {"role": "user"}, expires_delta=timedelta(minutes=-1))

    response = client.get("/menu-settings/navigation", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_navigation_rejects_unknown_role_claim(client: TestClient) -> None:
    response = client.get("/menu-settings/navigation", headers=login_headers("mallory", "root"))

    assert response.status_code == 401


def test_navigation_for_user(client: TestClient) -> None:
    response = client.get("/menu-settings/navigation", headers=login_headers("alice", "user"))

    assert response.status_code == 200
    payload = response.json()
    assert [group["category"] for group in payload] == ["primary", "secondary"]
    assert payload[0]["items"][0] == {
        "menuId": "dashboard",
        "label": "Dashboard",
        "path": "/",
        "order": 1,
        "icon": None,
    }


def test_navigation_for_admin_includes_team_roster(client: TestClient) -> None:
    response = client.get("/menu-settings/navigation", headers=login_headers())

    assert response.status_code == 200
    assert "team-roster" in _navigation_ids(response)


def test_admin_routes_are_forbidden_to_non_admins(client: TestClient) -> None:
    headers = login_headers("steward", "data-steward")

    assert client.get("/menu-settings/", headers=headers).status_code == 403
    assert client.patch("/menu-settings/dashboard/toggle", headers=headers).status_code == 403
    assert client.post("/menu-settings/initialize", headers=headers).status_code == 403


def test_list_and_get_items(client: TestClient) -> None:
    headers = login_headers()

    listing = client.get("/menu-settings/", params={"category": "secondary"}, headers=headers)
    assert listing.status_code == 200
    assert [item["menuId"] for item in listing.json()] == ["about-e-unify", "documentation", "settings"]

    detail = client.get("/menu-settings/team-roster", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["requiredRole"] == "admin"
    assert detail.json()["order"] == 85


def test_unknown_item_returns_404(client: TestClient) -> None:
    headers = login_headers()

    assert client.get("/menu-settings/missing", headers=headers).status_code == 404
    assert client.patch("/menu-settings/missing/toggle", headers=headers).status_code == 404
    assert client.delete("/menu-settings/missing", headers=headers).status_code == 404


def test_disable_hides_item_from_navigation(client: TestClient) -> None:
    response = client.patch("/menu-settings/dashboard/enabled", json={"isEnabled": False}, headers=login_headers())

    assert response.status_code == 200
    assert response.json()["isEnabled"] is False

    navigation = client.get("/menu-settings/navigation", headers=login_headers("alice", "user"))
    assert "dashboard" not in _navigation_ids(navigation)


def test_bulk_toggle_hides_items_from_navigation(client: TestClient) -> None:
    response = client.patch(
        "/menu-settings/bulk-toggle",
        json={"menuIds": ["dashboard", "analytics"], "isEnabled": False},
        headers=login_headers(),
    )

    assert response.status_code == 200
    assert [entry["menuId"] for entry in response.json()] == ["dashboard", "analytics"]
    assert all(entry["isEnabled"] is False for entry in response.json())

    navigation = client.get("/menu-settings/navigation", headers=login_headers("alice", "user"))
    assert {"dashboard", "analytics"}.isdisjoint(_navigation_ids(navigation))


def test_bulk_toggle_rejects_empty_and_unknown_ids(client: TestClient) -> None:
    headers = login_headers()

    empty = client.patch("/menu-settings/bulk-toggle", json={"menuIds": [], "isEnabled": False}, headers=headers)
    unknown = client.patch(
        "/menu-settings/bulk-toggle", json={"menuIds": ["dashboard", "ghost"], "isEnabled": False}, headers=headers
    )

    assert empty.status_code == 422
    assert unknown.status_code == 404
    assert "ghost" in unknown.json()["detail"]
    assert client.get("/menu-settings/dashboard", headers=headers).json()["isEnabled"] is True


def test_bulk_toggle_is_reserved_to_admins(client: TestClient) -> None:
    response = client.patch(
        "/menu-settings/bulk-toggle",
        json={"menuIds": ["dashboard"], "isEnabled": False},
        headers=login_headers("sam", "data-steward"),
    )

    assert response.status_code == 403


def test_initialize_keeps_disabled_item_disabled(client: TestClient) -> None:
    headers = login_headers()
    client.patch("/menu-settings/dashboard/toggle", headers=headers)

    response = client.post("/menu-settings/initialize", headers=headers)

    assert response.status_code == 200
    assert response.json()["created"] == []
    assert client.get("/menu-settings/dashboard", headers=headers).json()["isEnabled"] is False


def test_reorder_updates_position(client: TestClient) -> None:
    response = client.patch("/menu-settings/team-roster/order", json={"order": 2}, headers=login_headers())

    assert response.status_code == 200
    assert response.json()["order"] == 2


def test_reorder_rejects_invalid_position(client: TestClient) -> None:
    headers = login_headers()

    assert client.patch("/menu-settings/team-roster/order", json={"order": -3}, headers=headers).status_code == 422
    assert client.patch("/menu-settings/team-roster/order", json={"order": "3"}, headers=headers).status_code == 422


def test_put_creates_then_updates(client: TestClient) -> None:
    headers = login_headers()
    body = {"label": "Data Quality", "path": "/data-quality", "requiredRole": "data-steward"}

    created = client.put("/menu-settings/data-quality", json=body, headers=headers)
    assert created.status_code == 201
    assert created.json()["menuId"] == "data-quality"

    updated = client.put("/menu-settings/data-quality", json={"order": 4}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["order"] == 4
    assert updated.json()["label"] == "Data Quality"


def test_put_reports_violations(client: TestClient) -> None:
    response = client.put("/menu-settings/orphan", json={"order": 3}, headers=login_headers())

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert {violation["field"] for violation in detail["violations"]} == {"label", "path"}


def test_create_conflict_and_delete(client: TestClient) -> None:
    headers = login_headers()
    body = {"menuId": "dashboard", "label": "Dashboard", "path": "/"}

    assert client.post("/menu-settings/", json=body, headers=headers).status_code == 409

    created = client.post("/menu-settings/", json={**body, "menuId": "home"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["createdAt"] is not None

    assert client.delete("/menu-settings/home", headers=headers).status_code == 204
    assert client.get("/menu-settings/home", headers=headers).status_code == 404


def test_unavailable_store_returns_503(client: TestClient) -> None:
    app.state.menu_store = MenuRegistryStore(UnreachableCollection())

    response = client.get("/menu-settings/navigation", headers=login_headers())

    assert response.status_code == 503


def test_missing_store_returns_503(client: TestClient) -> None:
    app.state.menu_store = None

    assert client.get("/menu-settings/navigation", headers=login_headers()).status_code == 503


def test_me_returns_token_identity(client: TestClient) -> None:
    response = client.get("/auth/me", headers=login_headers("steward", "data-steward"))

    assert response.status_code == 200
    assert response.json() == {"username": "steward", "role": "data-steward"}
