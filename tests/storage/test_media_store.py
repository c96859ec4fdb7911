"""Tests for media store backends."""

from unittest.mock import Mock, patch

import pytest

from showcase.config.settings import Settings
from showcase.storage.service import (
    FirebaseMediaStore,
    InMemoryMediaStore,
    StorageNotConfiguredError,
    StorageUploadError,
)


@pytest.fixture
def firebase_settings() -> Settings:
    return Settings(
        firebase_enabled=True,
        firebase_credentials_path="/nonexistent/service-account.json",
        firebase_storage_bucket="showcase.appspot.com",
    )


@pytest.mark.asyncio
async def test_in_memory_round_trip() -> None:
    media = InMemoryMediaStore(base_url="memory://media/")

    path = await media.upload("talent-media", "u1-1.png", b"png", "image/png")

    assert path == "u1-1.png"
    assert media.objects["talent-media/u1-1.png"] == (b"png", "image/png")
    assert await media.get_public_url("talent-media", path) == (
        "memory://media/talent-media/u1-1.png"
    )


@pytest.mark.asyncio
async def test_public_url_is_encoded(firebase_settings: Settings) -> None:
    store = FirebaseMediaStore(firebase_settings)

    url = await store.get_public_url("talent-media", "a b.jpg")

    assert url == "https://storage.googleapis.com/showcase.appspot.com/talent-media/a%20b.jpg"


@pytest.mark.asyncio
async def test_upload_without_configuration() -> None:
    store = FirebaseMediaStore(Settings(firebase_enabled=False))

    with pytest.raises(StorageNotConfiguredError):
        await store.upload("talent-media", "x.png", b"x", "image/png")


@pytest.mark.asyncio
async def test_missing_credentials_file(firebase_settings: Settings) -> None:
    store = FirebaseMediaStore(firebase_settings)

    with pytest.raises(StorageNotConfiguredError, match="credentials file not found"):
        await store.upload("talent-media", "x.png", b"x", "image/png")


@pytest.mark.asyncio
async def test_upload_writes_public_immutable_blob(firebase_settings: Settings) -> None:
    store = FirebaseMediaStore(firebase_settings)
    bucket = Mock()

    with patch.object(store, "_get_bucket", return_value=bucket):
        path = await store.upload("talent-media", "u-1.mp4", b"\0\0", "video/mp4")

    assert path == "u-1.mp4"
    bucket.blob.assert_called_once_with("talent-media/u-1.mp4")
    blob = bucket.blob.return_value
    blob.upload_from_string.assert_called_once_with(b"\0\0", content_type="video/mp4")
    blob.make_public.assert_called_once()
    assert blob.cache_control == FirebaseMediaStore.CACHE_CONTROL


@pytest.mark.asyncio
async def test_sdk_failure_becomes_upload_error(firebase_settings: Settings) -> None:
    store = FirebaseMediaStore(firebase_settings)
    bucket = Mock()
    bucket.blob.return_value.upload_from_string.side_effect = RuntimeError("quota")

    with (
        patch.object(store, "_get_bucket", return_value=bucket),
        pytest.raises(StorageUploadError),
    ):
        await store.upload("talent-media", "u-1.png", b"x", "image/png")
