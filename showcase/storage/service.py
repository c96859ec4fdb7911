"""Media storage for talent uploads.

``MediaStore`` is the contract the mutation coordinator depends on:
``upload`` a binary object to a path inside a named bucket, then resolve its
``get_public_url``. Buckets map to top-level folders of the configured
Firebase Storage bucket.

The size ceiling is enforced by the caller before any upload is attempted.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote

import structlog
from fastapi.concurrency import run_in_threadpool

from showcase.config.settings import Settings


if TYPE_CHECKING:
    from google.cloud.storage import Blob, Bucket


logger = structlog.get_logger(__name__)


class StorageError(Exception):
    """Base error for storage operations."""

    def __init__(self, message: str, code: str = "storage_error") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class StorageNotConfiguredError(StorageError):
    """Error when Firebase Storage is not configured."""

    def __init__(self, message: str = "Firebase Storage is not configured") -> None:
        super().__init__(message, "storage_not_configured")


class StorageUploadError(StorageError):
    """Error during file upload."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "upload_error")


class MediaStore(Protocol):
    """Binary object storage addressed by bucket and path."""

    async def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> str:
        """Store ``content`` and return its path."""
        ...

    async def get_public_url(self, bucket: str, path: str) -> str:
        """Public URL of a stored object."""
        ...


def object_name(bucket: str, path: str) -> str:
    """Object name of ``path`` inside the ``bucket`` folder."""
    return f"{bucket.strip('/')}/{path.lstrip('/')}"


def _credentials_file(settings: Settings) -> Path:
    """Service account file; relative paths resolve from the project root."""
    path = Path(settings.firebase_credentials_path or "")
    if not path.is_absolute():
        path = Path(__file__).resolve().parents[2] / path
    return path


class FirebaseMediaStore:
    """``MediaStore`` backed by Firebase Storage.

    The Admin SDK is initialized on first upload. Its calls block, so they run
    in the threadpool.
    """

    # Paths embed the upload time, so stored content never changes
    CACHE_CONTROL = "public, max-age=31536000, immutable"

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._bucket: Bucket | None = None

    def _get_bucket(self) -> "Bucket":
        if self._bucket is not None:
            return self._bucket
        if not self.settings.firebase_configured:
            raise StorageNotConfiguredError

        creds_path = _credentials_file(self.settings)
        if not creds_path.exists():
            raise StorageNotConfiguredError(
                f"Firebase credentials file not found: {creds_path}"
            )

        import firebase_admin  # noqa: PLC0415
        from firebase_admin import credentials, storage  # noqa: PLC0415

        try:
            try:
                app = firebase_admin.get_app()
            except ValueError:
                app = firebase_admin.initialize_app(
                    credentials.Certificate(str(creds_path)),
                    {
                        "storageBucket": self.settings.firebase_storage_bucket,
                        "projectId": self.settings.firebase_project_id,
                    },
                )
                logger.info(
                    "firebase_initialized",
                    bucket=self.settings.firebase_storage_bucket,
                )
            self._bucket = storage.bucket(app=app)
        except Exception as e:
            logger.exception("firebase_init_failed", error=str(e))
            raise StorageNotConfiguredError(f"Failed to initialize Firebase: {e}") from e
        return self._bucket

    def _put(self, name: str, content: bytes, content_type: str) -> None:
        blob: Blob = self._get_bucket().blob(name)
        blob.cache_control = self.CACHE_CONTROL
        blob.upload_from_string(content, content_type=content_type)
        blob.make_public()

    async def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> str:
        """Upload a media object and make it publicly readable.

        Raises:
            StorageNotConfiguredError: If Firebase is not configured.
            StorageUploadError: If the upload fails.
        """
        name = object_name(bucket, path)
        try:
            await run_in_threadpool(self._put, name, content, content_type)
        except StorageError:
            raise
        except Exception as e:
            logger.exception("media_upload_failed", storage_path=name, error=str(e))
            raise StorageUploadError(f"Failed to upload file: {e}") from e

        logger.info(
            "media_uploaded",
            storage_path=name,
            content_type=content_type,
            file_size=len(content),
        )
        return path

    async def get_public_url(self, bucket: str, path: str) -> str:
        encoded = quote(object_name(bucket, path), safe="/")
        return f"https://storage.googleapis.com/{self.settings.firebase_storage_bucket}/{encoded}"


class InMemoryMediaStore:
    """Process-local ``MediaStore`` used with the in-memory record store."""

    def __init__(self, base_url: str = "memory://media") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(
        self, bucket: str, path: str, content: bytes, content_type: str
    ) -> str:
        self.objects[object_name(bucket, path)] = (content, content_type)
        logger.debug("media_stored", storage_path=object_name(bucket, path))
        return path

    async def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{object_name(bucket, path)}"
