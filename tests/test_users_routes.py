"""
tests/test_users_routes.py -- Integration tests for /api/v1/users and /api/v1/roles.

Coverage:
  - every users-admin endpoint is 401 without a session and 403 for a role
    lacking "users"
  - admin happy path: paginated list, create, detail, update, delete
  - 404 / 409 / 400 error envelopes
  - roles list and detail gated on "roles"
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

_NEW_USER = {"first_name": "a", "last_name": "b", "email": "x@example.com", "password": "p", "role_id": 1}

USERS_ENDPOINTS = [
    ("GET", "/api/v1/users", None),
    ("POST", "/api/v1/users", _NEW_USER),
    ("GET", "/api/v1/users/1", None),
    ("PUT", "/api/v1/users/1", {"first_name": "changed"}),
    ("DELETE", "/api/v1/users/1", None),
]


class TestUsersGate:
    @pytest.mark.parametrize("method,url,body", USERS_ENDPOINTS)
    def test_no_session_is_401(self, api_client: TestClient, method: str, url: str, body) -> None:
        resp = api_client.request(method, url, json=body)
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    @pytest.mark.parametrize("method,url,body", USERS_ENDPOINTS)
    def test_role_without_users_is_403(
        self, api_client: TestClient, viewer_headers, method: str, url: str, body
    ) -> None:
        _, headers = viewer_headers
        resp = api_client.request(method, url, json=body, headers=headers)
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"

    def test_forbidden_request_mutates_nothing(self, api_client: TestClient, admin_headers, viewer_headers) -> None:
        admin_id, _ = admin_headers
        _, headers = viewer_headers
        api_client.delete(f"/api/v1/users/{admin_id}", headers=headers)
        assert api_client.app.state.user_store.get_by_id(admin_id) is not None


class TestUsersAdmin:
    def _role_id(self, client: TestClient, name: str) -> int:
        return client.app.state.user_store.get_role_by_name(name).id

    def test_list_is_paginated(self, api_client: TestClient, admin_headers, make_session) -> None:
        _, headers = admin_headers
        for i in range(6):
            make_session("viewer", f"list{i}@example.com")
        body = api_client.get("/api/v1/users?page=1", headers=headers).json()
        assert len(body["data"]) == 5
        assert body["meta"]["page"] == 1
        total = body["meta"]["total"]
        assert body["meta"]["last_page"] == -(-total // 5)
        assert all("hashed_password" not in u for u in body["data"])

        beyond = api_client.get(f"/api/v1/users?page={body['meta']['last_page'] + 1}", headers=headers).json()
        assert beyond["data"] == []

    def test_page_zero_clamped(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        assert api_client.get("/api/v1/users?page=0", headers=headers).json()["meta"]["page"] == 1

    def test_huge_page_is_empty_not_server_error(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        resp = api_client.get("/api/v1/users?page=10000000000000000000", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"] == []
        assert resp.json()["meta"]["page"] == 10000000000000000000

    def test_create_password_over_72_bytes(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        resp = api_client.post(
            "/api/v1/users",
            json={**_NEW_USER, "email": "wide@example.com", "password": "é" * 40},
            headers=headers,
        )
        assert resp.status_code == 422
        assert api_client.app.state.user_store.get_by_email("wide@example.com") is None

    def test_create_detail_update_delete(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        created = api_client.post(
            "/api/v1/users",
            json={
                "first_name": "New",
                "last_name": "Hire",
                "email": "new.hire@example.com",
                "password": "initial-pw",
                "role_id": self._role_id(api_client, "editor"),
            },
            headers=headers,
        )
        assert created.status_code == 201
        uid = created.json()["id"]
        assert created.json()["role"]["name"] == "editor"
        assert "password" not in created.json()

        detail = api_client.get(f"/api/v1/users/{uid}", headers=headers)
        assert detail.status_code == 200
        assert detail.json()["email"] == "new.hire@example.com"

        updated = api_client.put(
            f"/api/v1/users/{uid}",
            json={"last_name": "Promoted", "role_id": self._role_id(api_client, "admin")},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["last_name"] == "Promoted"
        assert updated.json()["role"]["name"] == "admin"

        deleted = api_client.delete(f"/api/v1/users/{uid}", headers=headers)
        assert deleted.status_code == 204
        assert api_client.get(f"/api/v1/users/{uid}", headers=headers).status_code == 404

    def test_create_with_unknown_role(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        resp = api_client.post(
            "/api/v1/users",
            json={**_NEW_USER, "email": "norole@example.com", "role_id": 999},
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "unknown_role"

    def test_create_duplicate_email(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        resp = api_client.post(
            "/api/v1/users",
            json={
                "first_name": "a",
                "last_name": "b",
                "email": "admin@example.com",
                "password": "p",
                "role_id": self._role_id(api_client, "viewer"),
            },
            headers=headers,
        )
        assert resp.status_code == 409

    def test_missing_user_404(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        for method, body in (("GET", None), ("PUT", {"first_name": "x"}), ("DELETE", None)):
            resp = api_client.request(method, "/api/v1/users/424242", json=body, headers=headers)
            assert resp.status_code == 404
            assert resp.json()["error"]["code"] == "user_not_found"

    def test_admin_cannot_delete_self(self, api_client: TestClient, admin_headers) -> None:
        admin_id, headers = admin_headers
        resp = api_client.delete(f"/api/v1/users/{admin_id}", headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "self_delete"


class TestRoles:
    def test_roles_require_roles_permission(self, api_client: TestClient, make_session) -> None:
        _, headers = make_session("editor", "editor-roles@example.com")
        assert api_client.get("/api/v1/roles", headers=headers).status_code == 403

    def test_list_and_detail(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        roles = api_client.get("/api/v1/roles", headers=headers).json()
        assert [r["name"] for r in roles] == ["admin", "editor", "viewer"]
        viewer = roles[2]
        detail = api_client.get(f"/api/v1/roles/{viewer['id']}", headers=headers)
        assert detail.json() == {"id": viewer["id"], "name": "viewer", "permissions": ["orders"]}

    def test_missing_role_404(self, api_client: TestClient, admin_headers) -> None:
        _, headers = admin_headers
        assert api_client.get("/api/v1/roles/999", headers=headers).status_code == 404
