"""Response envelopes shared by every view and action endpoint."""

from collections.abc import Callable
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from showcase.profiles.models import Profile

from .views import AggregatedListView, AggregatedView, ErrorDescriptor


ItemT = TypeVar("ItemT", bound=BaseModel)


class ErrorDetail(BaseModel):
    """Failure descriptor shown to the user."""

    code: str
    message: str

    @classmethod
    def from_descriptor(cls, error: ErrorDescriptor | None) -> "ErrorDetail | None":
        if error is None:
            return None
        return cls(code=error.code, message=error.message)


class ProfileSummary(BaseModel):
    """Author/owner data attached to a record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: str
    email: str
    initial: str

    @classmethod
    def from_profile(cls, profile: Profile | None) -> "ProfileSummary | None":
        if profile is None:
            return None
        return cls(
            id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            initial=profile.initial,
        )


class ViewResponse(BaseModel, Generic[ItemT]):
    """State of one aggregated view."""

    items: list[ItemT] = Field(default_factory=list)
    loading: bool = False
    last_error: ErrorDetail | None = None


class ActionResponse(BaseModel, Generic[ItemT]):
    """Outcome of a mutation plus the refreshed view."""

    success: bool
    error: ErrorDetail | None = None
    view: ViewResponse[ItemT]


def view_response(
    item_cls: type[ItemT],
    view: AggregatedListView[Any],
    item_factory: Callable[[AggregatedView[Any]], ItemT] | None = None,
) -> ViewResponse[ItemT]:
    """Serialize the current state of ``view`` as ``ViewResponse[item_cls]``.

    ``item_factory`` defaults to ``item_cls.from_view``.
    """
    factory = item_factory or item_cls.from_view
    state = view.state()
    return ViewResponse[item_cls](
        items=[factory(item) for item in state.items],
        loading=state.loading,
        last_error=ErrorDetail.from_descriptor(state.last_error),
    )


def action_response(
    item_cls: type[ItemT],
    view: AggregatedListView[Any],
    success: bool,
    error: ErrorDescriptor | None,
    item_factory: Callable[[AggregatedView[Any]], ItemT] | None = None,
) -> ActionResponse[ItemT]:
    return ActionResponse[item_cls](
        success=success,
        error=ErrorDetail.from_descriptor(error),
        view=view_response(item_cls, view, item_factory),
    )
