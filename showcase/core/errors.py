"""Error taxonomy shared by the aggregation and mutation layers.

Every error carries a human readable ``message`` and a stable ``code``; the
HTTP layer maps codes to status codes and the view layer stores them as
``ErrorDescriptor`` values.
"""

from typing import Any


class ShowcaseError(Exception):
    """Base showcase error."""

    def __init__(self, message: str, code: str = "showcase_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class StoreError(ShowcaseError):
    """Transport or query failure reported by the record store."""

    def __init__(
        self,
        message: str = "Record store request failed",
        code: str = "store_error",
        collection: str | None = None,
    ):
        self.collection = collection
        super().__init__(message, code)


class FetchFailure(StoreError):
    """An aggregation step failed; no partial result is returned."""

    def __init__(self, message: str = "Failed to load data", collection: str | None = None):
        super().__init__(message, "fetch_failure", collection)


class AuthRequiredError(ShowcaseError):
    """Mutation attempted without an authenticated viewer."""

    def __init__(self, message: str = "You must be logged in to do that"):
        super().__init__(message, "auth_required")


class PermissionDeniedError(ShowcaseError):
    """Viewer lacks the role required for the operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "permission_denied")


class ForbiddenTransitionError(ShowcaseError):
    """Moderation transition refused (protected identity)."""

    def __init__(self, message: str = "This transition is not allowed"):
        super().__init__(message, "forbidden_transition")


class ValidationFailureError(ShowcaseError):
    """Input rejected locally, before any network call."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, "validation_failure")


class NotFoundError(ShowcaseError):
    """Referenced record is not part of the current view."""

    def __init__(self, message: str = "Record not found"):
        super().__init__(message, "not_found")


def describe_error(error: ShowcaseError) -> dict[str, Any]:
    """Serialize an error for logging."""
    return {"error_code": error.code, "error": error.message}
