"""Hostel service requests raised by residents and handled by admins."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from showcase.store.base import CollectionSpec


class ServiceStatus(str, Enum):
    """Request status. The order is a display convention, not a rule."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class ServicePriority(str, Enum):
    """Requester-assigned priority."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# Display order used to detect (and log) regressions
STATUS_ORDER: dict[ServiceStatus, int] = {
    ServiceStatus.PENDING: 0,
    ServiceStatus.IN_PROGRESS: 1,
    ServiceStatus.COMPLETED: 2,
}

HOSTEL_SERVICES = CollectionSpec("hostel_services")

HOSTEL_SERVICE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.hostel_services (
    id UUID PRIMARY KEY,
    user_id UUID,
    service_type TEXT,
    hostel_block TEXT,
    room_number TEXT,
    status TEXT,
    priority TEXT,
    description TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

SERVICE_REQUESTS_TABLES_CQL = [HOSTEL_SERVICE_TABLE_CQL]


@dataclass
class ServiceRequest:
    """A hostel service request."""

    id: UUID
    user_id: UUID
    service_type: str
    hostel_block: str
    room_number: str
    status: str
    priority: str
    description: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ServiceRequest":
        """Create ServiceRequest from a store record."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            service_type=row.get("service_type") or "",
            hostel_block=row.get("hostel_block") or "",
            room_number=row.get("room_number") or "",
            status=row.get("status") or ServiceStatus.PENDING.value,
            priority=row.get("priority") or ServicePriority.MEDIUM.value,
            description=row.get("description") or "",
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )
