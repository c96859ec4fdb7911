"""Pydantic schemas for admin moderation endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from showcase.aggregation.schemas import ProfileSummary
from showcase.aggregation.views import AggregatedView
from showcase.auth.permissions import UserRole
from showcase.profiles.models import Profile
from showcase.service_requests.models import ServiceRequest


class UpdateRoleRequest(BaseModel):
    role: str = Field(..., description="user or admin")


class UpdateStatusRequest(BaseModel):
    status: str = Field(..., description="Pending, In Progress or Completed")


class UserResponse(BaseModel):
    """A profile in the admin user directory."""

    id: UUID
    full_name: str
    email: str
    role: UserRole
    department: str | None = None
    year: int | None = None
    created_at: datetime | None = None
    role_locked: bool = Field(
        False, description="Role control must be rendered inert"
    )

    @classmethod
    def from_profile(cls, profile: Profile, role_locked: bool) -> "UserResponse":
        return cls(
            id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            role=profile.role,
            department=profile.department,
            year=profile.year,
            created_at=profile.created_at,
            role_locked=role_locked,
        )


class ServiceRequestResponse(BaseModel):
    """A hostel service request with its requester profile."""

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
    profile: ProfileSummary | None = None

    @classmethod
    def from_view(cls, view: AggregatedView[ServiceRequest]) -> "ServiceRequestResponse":
        request = view.record
        return cls(
            id=request.id,
            user_id=request.user_id,
            service_type=request.service_type,
            hostel_block=request.hostel_block,
            room_number=request.room_number,
            status=request.status,
            priority=request.priority,
            description=request.description,
            created_at=request.created_at,
            updated_at=request.updated_at,
            profile=ProfileSummary.from_profile(view.profile),
        )
