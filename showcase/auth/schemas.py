"""Pydantic schemas for the authenticated viewer."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from showcase.auth.permissions import UserRole


class Viewer(BaseModel):
    """Identity extracted from a validated access token."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(..., description="Profile id (token subject)")
    email: str = Field(default="", description="Email claim")
    role: UserRole = Field(default=UserRole.USER, description="Role claim")

    @classmethod
    def from_claims(cls, payload: dict) -> "Viewer":
        try:
            role = UserRole(payload.get("role") or UserRole.USER.value)
        except ValueError:
            role = UserRole.USER
        return cls(id=payload["sub"], email=payload.get("email") or "", role=role)
