"""Tests for the talent feed API."""

from fastapi import status
from fastapi.testclient import TestClient

from conftest import auth_headers, profile_row, run, talent_row
from showcase.store.memory import InMemoryRecordStore


def _seed(app_store: InMemoryRecordStore):
    author = profile_row("Anil Bose")
    run(app_store.insert("profiles", author))
    guitar = talent_row(author["id"], "Strings", tags=["guitar"], minutes=1)
    sketch = talent_row(author["id"], "Charcoal", tags=["art"], minutes=2)
    run(app_store.insert("talents", guitar))
    run(app_store.insert("talents", sketch))
    return author, guitar, sketch


class TestFeed:
    """GET /v1/talents."""

    def test_feed_newest_first_with_profiles(
        self, client: TestClient, app_store: InMemoryRecordStore
    ) -> None:
        _seed(app_store)

        response = client.get("/v1/talents")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert [t["title"] for t in body["items"]] == ["Charcoal", "Strings"]
        assert body["items"][0]["profile"]["full_name"] == "Anil Bose"
        assert body["items"][0]["profile"]["initial"] == "A"
        assert body["last_error"] is None
        assert body["loading"] is False

    def test_feed_filter(self, client: TestClient, app_store: InMemoryRecordStore) -> None:
        _seed(app_store)

        response = client.get("/v1/talents", params={"q": "GUITAR"})

        assert [t["title"] for t in response.json()["items"]] == ["Strings"]

    def test_unknown_sort_is_validation_failure(self, client: TestClient) -> None:
        response = client.get("/v1/talents", params={"sort": "title"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["last_error"]["code"] == "validation_failure"

    def test_invalid_token_reads_anonymously(
        self, client: TestClient, app_store: InMemoryRecordStore
    ) -> None:
        _seed(app_store)

        response = client.get("/v1/talents", headers={"Authorization": "Bearer nope"})

        assert response.status_code == status.HTTP_200_OK
        assert not any(t["is_liked_by_viewer"] for t in response.json()["items"])


class TestLike:
    """POST /v1/talents/{id}/like."""

    def test_anonymous_like_is_401(
        self, client: TestClient, app_store: InMemoryRecordStore
    ) -> None:
        _, guitar, _ = _seed(app_store)

        response = client.post(f"/v1/talents/{guitar['id']}/like")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "auth_required"

    def test_like_then_unlike(
        self,
        client: TestClient,
        app_store: InMemoryRecordStore,
        user_row: dict,
    ) -> None:
        _, guitar, _ = _seed(app_store)
        headers = auth_headers(user_row)

        liked = client.post(f"/v1/talents/{guitar['id']}/like", headers=headers)
        card = next(t for t in liked.json()["view"]["items"] if t["id"] == str(guitar["id"]))
        assert liked.status_code == status.HTTP_200_OK
        assert (card["is_liked_by_viewer"], card["likes_count"]) == (True, 1)

        unliked = client.post(f"/v1/talents/{guitar['id']}/like", headers=headers)
        card = next(
            t for t in unliked.json()["view"]["items"] if t["id"] == str(guitar["id"])
        )
        assert (card["is_liked_by_viewer"], card["likes_count"]) == (False, 0)

    def test_like_unknown_talent_is_404(self, client: TestClient, user_row: dict) -> None:
        response = client.post(
            "/v1/talents/00000000-0000-0000-0000-000000000001/like",
            headers=auth_headers(user_row),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestUpload:
    """POST /v1/talents (multipart)."""

    def test_upload_creates_talent(
        self, client: TestClient, app_store: InMemoryRecordStore, user_row: dict
    ) -> None:
        response = client.post(
            "/v1/talents",
            headers=auth_headers(user_row),
            data={"title": "Night sky", "category": "Photography", "tags": "stars, night"},
            files={"media": ("sky.jpg", b"\xff\xd8\xff", "image/jpeg")},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["success"] is True
        card = body["view"]["items"][0]
        assert card["title"] == "Night sky"
        assert card["media_type"] == "image"
        assert card["tags"] == ["stars", "night"]
        assert card["media_url"].endswith(".jpg")
        assert card["profile"]["full_name"] == "Ravi Kumar"

        media_store = client.app.state.media_store
        assert len(media_store.objects) == 1

    def test_upload_without_media_is_422(
        self, client: TestClient, app_store: InMemoryRecordStore, user_row: dict
    ) -> None:
        response = client.post(
            "/v1/talents",
            headers=auth_headers(user_row),
            data={"title": "No file"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["code"] == "validation_failure"
        assert run(app_store.query("talents")) == []

    def test_anonymous_upload_is_401(self, client: TestClient) -> None:
        response = client.post(
            "/v1/talents",
            data={"title": "x"},
            files={"media": ("a.png", b"png", "image/png")},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert client.app.state.media_store.objects == {}
