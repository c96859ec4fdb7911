"""Comment records for talent discussion threads.

Comments are append-only: no edit or delete. A thread is all comments of one
talent ordered by creation time, oldest first.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from showcase.store.base import CollectionSpec


TALENT_COMMENTS = CollectionSpec(
    "talent_comments", key_fields=("talent_id", "created_at", "id")
)

# Partition by talent, clustering by created_at for chronological threads
TALENT_COMMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.talent_comments (
    talent_id UUID,
    created_at TIMESTAMP,
    id UUID,
    user_id UUID,
    content TEXT,
    PRIMARY KEY ((talent_id), created_at, id)
) WITH CLUSTERING ORDER BY (created_at ASC, id ASC)
"""

COMMENTS_TABLES_CQL = [TALENT_COMMENT_TABLE_CQL]


@dataclass
class TalentComment:
    """A comment on a talent."""

    id: UUID
    talent_id: UUID
    user_id: UUID
    content: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TalentComment":
        """Create TalentComment from a store record."""
        return cls(
            id=row["id"],
            talent_id=row["talent_id"],
            user_id=row["user_id"],
            content=row.get("content") or "",
            created_at=row["created_at"],
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to a store record."""
        return {
            "id": self.id,
            "talent_id": self.talent_id,
            "user_id": self.user_id,
            "content": self.content,
            "created_at": self.created_at,
        }


def create_comment(talent_id: UUID, user_id: UUID, content: str) -> TalentComment:
    """Create a new comment stamped with the current time."""
    return TalentComment(
        id=uuid4(),
        talent_id=talent_id,
        user_id=user_id,
        content=content,
        created_at=datetime.now(UTC),
    )
