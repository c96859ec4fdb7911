"""Media storage for talent uploads."""

from showcase.storage.service import (
    FirebaseMediaStore,
    InMemoryMediaStore,
    MediaStore,
    StorageError,
    StorageNotConfiguredError,
    StorageUploadError,
)


__all__ = [
    "FirebaseMediaStore",
    "InMemoryMediaStore",
    "MediaStore",
    "StorageError",
    "StorageNotConfiguredError",
    "StorageUploadError",
]
