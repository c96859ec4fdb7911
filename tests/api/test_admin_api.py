"""Tests for the admin moderation API."""

from uuid import uuid4

from fastapi import status
from fastapi.testclient import TestClient

from conftest import auth_headers, profile_row, run, service_row, talent_row
from showcase.store.memory import InMemoryRecordStore


class TestAdminGate:
    def test_non_admin_is_403(self, client: TestClient, user_row: dict) -> None:
        for method, path in (
            ("GET", "/v1/admin/talents"),
            ("GET", "/v1/admin/users"),
            ("GET", "/v1/admin/services"),
        ):
            response = client.request(method, path, headers=auth_headers(user_row))
            assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_anonymous_is_401(self, client: TestClient) -> None:
        response = client.get("/v1/admin/users")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestTalentModeration:
    def test_delete_requires_confirm(
        self, client: TestClient, app_store: InMemoryRecordStore, admin_row: dict
    ) -> None:
        talent = talent_row(admin_row["id"], "Spam")
        run(app_store.insert("talents", talent))
        headers = auth_headers(admin_row)

        refused = client.delete(f"/v1/admin/talents/{talent['id']}", headers=headers)
        assert refused.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert len(run(app_store.query("talents"))) == 1

        deleted = client.delete(
            f"/v1/admin/talents/{talent['id']}",
            params={"confirm": "true"},
            headers=headers,
        )
        assert deleted.status_code == status.HTTP_200_OK
        assert deleted.json()["view"]["items"] == []


class TestUserModeration:
    def test_directory_marks_locked_roles(
        self, client: TestClient, app_store: InMemoryRecordStore, admin_row: dict
    ) -> None:
        root = profile_row("Root Owner", email="root@example.com", role="admin")
        other = profile_row("Sam Student")
        run(app_store.insert("profiles", root))
        run(app_store.insert("profiles", other))

        response = client.get("/v1/admin/users", headers=auth_headers(admin_row))

        locked = {u["full_name"]: u["role_locked"] for u in response.json()["items"]}
        assert locked == {"Priya Admin": True, "Root Owner": True, "Sam Student": False}

    def test_directory_filter(
        self, client: TestClient, app_store: InMemoryRecordStore, admin_row: dict
    ) -> None:
        run(app_store.insert("profiles", profile_row("Sam Student")))

        response = client.get(
            "/v1/admin/users", params={"q": "sam@"}, headers=auth_headers(admin_row)
        )

        assert [u["full_name"] for u in response.json()["items"]] == ["Sam Student"]

    def test_protected_identity_refused(
        self, client: TestClient, app_store: InMemoryRecordStore, admin_row: dict
    ) -> None:
        root = profile_row("Root Owner", email="root@example.com", role="admin")
        run(app_store.insert("profiles", root))

        response = client.patch(
            f"/v1/admin/users/{root['id']}/role",
            json={"role": "user"},
            headers=auth_headers(admin_row),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"]["code"] == "forbidden_transition"
        stored = run(app_store.query("profiles", {"id": root["id"]}))
        assert stored[0]["role"] == "admin"

    def test_promote_user(
        self,
        client: TestClient,
        app_store: InMemoryRecordStore,
        admin_row: dict,
        user_row: dict,
    ) -> None:
        response = client.patch(
            f"/v1/admin/users/{user_row['id']}/role",
            json={"role": "admin"},
            headers=auth_headers(admin_row),
        )

        assert response.status_code == status.HTTP_200_OK
        items = response.json()["view"]["items"]
        user = next(u for u in items if u["id"] == str(user_row["id"]))
        assert user["role"] == "admin"

    def test_unknown_profile_is_404(self, client: TestClient, admin_row: dict) -> None:
        response = client.patch(
            f"/v1/admin/users/{uuid4()}/role",
            json={"role": "admin"},
            headers=auth_headers(admin_row),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestServiceRequests:
    def test_list_and_update_status(
        self,
        client: TestClient,
        app_store: InMemoryRecordStore,
        admin_row: dict,
        user_row: dict,
    ) -> None:
        request = service_row(user_row["id"], status="Completed")
        run(app_store.insert("hostel_services", request))
        headers = auth_headers(admin_row)

        listed = client.get("/v1/admin/services", headers=headers)
        assert listed.json()["items"][0]["profile"]["full_name"] == "Ravi Kumar"

        response = client.patch(
            f"/v1/admin/services/{request['id']}/status",
            json={"status": "Pending"},
            headers=headers,
        )

        assert response.status_code == status.HTTP_200_OK
        item = response.json()["view"]["items"][0]
        assert item["status"] == "Pending"
        assert item["updated_at"] is not None

    def test_unknown_status_is_422(
        self,
        client: TestClient,
        app_store: InMemoryRecordStore,
        admin_row: dict,
    ) -> None:
        request = service_row(admin_row["id"])
        run(app_store.insert("hostel_services", request))

        response = client.patch(
            f"/v1/admin/services/{request['id']}/status",
            json={"status": "Closed"},
            headers=auth_headers(admin_row),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
