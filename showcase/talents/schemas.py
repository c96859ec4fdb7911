"""Pydantic schemas for the talent feed."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from showcase.aggregation.schemas import ProfileSummary
from showcase.aggregation.views import AggregatedView

from .models import MediaType, Talent


class TalentResponse(BaseModel):
    """One feed card: talent, owner profile and viewer state."""

    id: UUID
    user_id: UUID
    title: str
    description: str
    category: str
    tags: list[str] = Field(default_factory=list)
    media_url: str | None = None
    media_type: MediaType
    likes_count: int = Field(0, ge=0)
    created_at: datetime
    is_liked_by_viewer: bool = False
    profile: ProfileSummary | None = None

    @classmethod
    def from_view(cls, view: AggregatedView[Talent]) -> "TalentResponse":
        talent = view.record
        return cls(
            id=talent.id,
            user_id=talent.user_id,
            title=talent.title,
            description=talent.description,
            category=talent.category,
            tags=talent.tags,
            media_url=talent.media_url,
            media_type=talent.media_type,
            likes_count=talent.likes_count,
            created_at=talent.created_at,
            is_liked_by_viewer=view.is_liked_by_viewer,
            profile=ProfileSummary.from_profile(view.profile),
        )
