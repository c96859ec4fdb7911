"""Talent (content item) and like records.

Cassandra table definitions for:
- talents: uploaded media artifacts
- talent_like_counts: like counter per talent (COUNTER column)
- talent_likes: one row per (talent, viewer); existence means "liked"

``likes_count`` is owned by the store: it moves when a like row is created or
removed (see ``LIKES_COUNT``) and is never written by the application.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from showcase.store.base import CollectionSpec, DerivedCount


class TalentCategory(str, Enum):
    """Fixed set of talent categories."""

    MUSIC = "Music"
    DANCE = "Dance"
    ART = "Art"
    SPORTS = "Sports"
    PHOTOGRAPHY = "Photography"
    WRITING = "Writing"
    ACTING = "Acting"
    CODING = "Coding"
    OTHER = "Other"


class MediaType(str, Enum):
    """Kind of media attached to a talent."""

    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def from_mime(cls, content_type: str | None) -> "MediaType":
        """``video/...`` is a video, anything else is treated as an image."""
        if content_type and content_type.lower().startswith("video"):
            return cls.VIDEO
        return cls.IMAGE


class SortKey(str, Enum):
    """Supported feed orderings (always descending)."""

    CREATED_AT = "created_at"
    LIKES_COUNT = "likes_count"


TALENTS = CollectionSpec("talents")
TALENT_LIKES = CollectionSpec("talent_likes", key_fields=("talent_id", "user_id"))

LIKES_COUNT = DerivedCount(
    source=TALENT_LIKES.name,
    source_field="talent_id",
    target=TALENTS.name,
    target_field="likes_count",
    counter_table="talent_like_counts",
)


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

TALENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.talents (
    id UUID PRIMARY KEY,
    user_id UUID,
    title TEXT,
    description TEXT,
    category TEXT,
    tags LIST<TEXT>,
    media_url TEXT,
    media_type TEXT,
    created_at TIMESTAMP
)
"""

# Like counts - counter table, merged into talents on read
TALENT_LIKE_COUNTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.talent_like_counts (
    talent_id UUID PRIMARY KEY,
    likes_count COUNTER
)
"""

# Partition by talent so unlike is a single-partition delete
TALENT_LIKES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.talent_likes (
    talent_id UUID,
    user_id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((talent_id), user_id)
)
"""

# Viewer personalization reads all likes of one user
TALENT_LIKES_USER_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS talent_likes_user_idx
ON {keyspace}.talent_likes (user_id)
"""

TALENTS_TABLES_CQL = [
    TALENT_TABLE_CQL,
    TALENT_LIKE_COUNTS_TABLE_CQL,
    TALENT_LIKES_TABLE_CQL,
    TALENT_LIKES_USER_INDEX_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Talent:
    """Uploaded talent."""

    id: UUID
    user_id: UUID
    title: str
    description: str
    category: str
    media_url: str | None
    media_type: MediaType
    created_at: datetime
    tags: list[str] = field(default_factory=list)
    likes_count: int = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Talent":
        """Create Talent from a store record."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            title=row.get("title") or "",
            description=row.get("description") or "",
            category=row.get("category") or TalentCategory.OTHER.value,
            media_url=row.get("media_url"),
            media_type=MediaType(row.get("media_type") or MediaType.IMAGE.value),
            created_at=row["created_at"],
            tags=list(row.get("tags") or []),
            likes_count=max(0, row.get("likes_count") or 0),
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to a store record."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "media_url": self.media_url,
            "media_type": self.media_type.value,
            "likes_count": self.likes_count,
            "created_at": self.created_at,
        }


# ==============================================================================
# Factory Functions
# ==============================================================================


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag string, dropping blanks."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def create_talent(
    user_id: UUID,
    title: str,
    description: str,
    category: TalentCategory,
    media_url: str,
    media_type: MediaType,
    tags: list[str] | None = None,
) -> Talent:
    """Create a new talent with a zero like counter."""
    return Talent(
        id=uuid4(),
        user_id=user_id,
        title=title,
        description=description,
        category=category.value,
        media_url=media_url,
        media_type=media_type,
        created_at=datetime.now(UTC),
        tags=tags or [],
        likes_count=0,
    )


def like_record(talent_id: UUID, user_id: UUID) -> dict[str, Any]:
    """Build a like row for insertion."""
    return {
        "talent_id": talent_id,
        "user_id": user_id,
        "created_at": datetime.now(UTC),
    }
