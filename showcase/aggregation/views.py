"""View models produced by the aggregation layer.

``AggregatedView`` is the transient projection of one primary record with its
related profile and viewer-relative state. ``AggregatedListView`` holds the
state a rendering layer consumes for one screen: the last-loaded items, a
``loading`` flag and the ``last_error`` descriptor.

Views are never authoritative. ``refresh()`` re-derives the whole list from
the store and replaces it on completion; when overlapping refreshes run, the
one that completes last wins.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from showcase.core.errors import ShowcaseError
from showcase.profiles.models import Profile

from .filtering import filter_views


logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AggregatedView(Generic[T]):
    """A primary record plus its attached profile and viewer state."""

    record: T
    profile: Profile | None = None
    is_liked_by_viewer: bool = False

    @property
    def id(self) -> Any:
        return getattr(self.record, "id", None)

    @property
    def like_count(self) -> int | None:
        """Store-maintained like counter, when the record has one."""
        return getattr(self.record, "likes_count", None)


@dataclass(frozen=True)
class ErrorDescriptor:
    """User-facing description of the last failure of a view or action."""

    code: str
    message: str

    @classmethod
    def from_error(cls, error: ShowcaseError) -> "ErrorDescriptor":
        return cls(code=error.code, message=error.message)


@dataclass(frozen=True)
class ViewState(Generic[T]):
    """Immutable snapshot handed to the rendering layer."""

    items: tuple[AggregatedView[T], ...]
    loading: bool
    last_error: ErrorDescriptor | None


Loader = Callable[[], Awaitable[list[AggregatedView[T]]]]


class AggregatedListView(Generic[T]):
    """Holds the last-loaded aggregation for one screen."""

    def __init__(
        self,
        name: str,
        loader: Loader[T],
        filter_fields: Sequence[str] = (),
        filter_text: str = "",
    ) -> None:
        self.name = name
        self._loader = loader
        self.filter_fields = tuple(filter_fields)
        self.filter_text = filter_text
        self.loaded: list[AggregatedView[T]] = []
        self.loading = False
        self.last_error: ErrorDescriptor | None = None

    @property
    def items(self) -> list[AggregatedView[T]]:
        """Last-loaded items after the client-side text filter."""
        if not self.filter_fields:
            return list(self.loaded)
        return filter_views(self.loaded, self.filter_text, self.filter_fields)

    def set_filter(self, text: str) -> None:
        """Change the text filter; applied locally, no re-fetch."""
        self.filter_text = text

    def find(self, record_id: Any) -> AggregatedView[T] | None:
        """Look up a record in the last-loaded (unfiltered) items."""
        return next((v for v in self.loaded if v.id == record_id), None)

    async def refresh(self) -> bool:
        """Re-fetch through the loader and replace the items.

        On failure the previous items stay in place and ``last_error`` is
        set. Returns whether the load succeeded.
        """
        self.loading = True
        try:
            result = await self._loader()
        except ShowcaseError as e:
            self.last_error = ErrorDescriptor.from_error(e)
            logger.warning(
                "view_refresh_failed",
                view=self.name,
                error_code=e.code,
                error=e.message,
            )
            return False
        finally:
            self.loading = False

        self.loaded = result
        self.last_error = None
        logger.debug("view_refreshed", view=self.name, count=len(result))
        return True

    def state(self) -> ViewState[T]:
        """Snapshot of the current view state."""
        return ViewState(
            items=tuple(self.items),
            loading=self.loading,
            last_error=self.last_error,
        )
