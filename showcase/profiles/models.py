"""Profile records.

A profile shares its id with the authentication subject and is created when
the account is provisioned (outside this service). The only mutation made
here is the role update performed through the moderation state machine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from showcase.auth.permissions import UserRole
from showcase.store.base import CollectionSpec


PROFILES = CollectionSpec("profiles")

PROFILE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.profiles (
    id UUID PRIMARY KEY,
    full_name TEXT,
    email TEXT,
    role TEXT,
    department TEXT,
    year INT,
    created_at TIMESTAMP
)
"""

PROFILES_TABLES_CQL = [PROFILE_TABLE_CQL]


@dataclass
class Profile:
    """User profile as stored in the ``profiles`` collection."""

    id: UUID
    full_name: str
    email: str
    role: UserRole
    department: str | None = None
    year: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        """Create Profile from a store record."""
        try:
            role = UserRole(row.get("role") or UserRole.USER.value)
        except ValueError:
            role = UserRole.USER
        return cls(
            id=row["id"],
            full_name=row.get("full_name") or "",
            email=row.get("email") or "",
            role=role,
            department=row.get("department"),
            year=row.get("year"),
            created_at=row.get("created_at"),
        )

    @property
    def initial(self) -> str:
        """Avatar initial shown next to the author name."""
        return self.full_name[:1].upper() or "U"
