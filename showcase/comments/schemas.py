"""Pydantic schemas for talent comment threads."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from showcase.aggregation.schemas import ProfileSummary
from showcase.aggregation.views import AggregatedView

from .models import TalentComment


class CreateCommentRequest(BaseModel):
    """Request to post a comment.

    Blank content is rejected by the coordinator, not here, so the error
    carries the same code as every other validation failure.
    """

    content: str = Field(..., max_length=10000)


class CommentResponse(BaseModel):
    """A comment with its author profile."""

    id: UUID
    talent_id: UUID
    user_id: UUID
    content: str
    created_at: datetime
    profile: ProfileSummary | None = None

    @classmethod
    def from_view(cls, view: AggregatedView[TalentComment]) -> "CommentResponse":
        comment = view.record
        return cls(
            id=comment.id,
            talent_id=comment.talent_id,
            user_id=comment.user_id,
            content=comment.content,
            created_at=comment.created_at,
            profile=ProfileSummary.from_profile(view.profile),
        )
