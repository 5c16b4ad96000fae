"""Pydantic schemas for profiles and the profession catalog"""
from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import CamelModel, strip_required, strip_optional


class ProfileCreate(CamelModel):
    """Create a profile. The id may be supplied by the client."""
    id: Optional[str] = Field(None, min_length=1, max_length=36)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    age: Optional[int] = Field(None, ge=0, le=150)
    professions: List[str] = Field(default_factory=list)
    message: Optional[str] = Field(None, max_length=2000)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("message")
    @classmethod
    def trim_message(cls, v: Optional[str]) -> Optional[str]:
        return strip_optional(v)


class ProfileUpdate(CamelModel):
    """Update a profile. professions, when given, replaces the whole set."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = Field(None, ge=0, le=150)
    professions: Optional[List[str]] = None
    message: Optional[str] = Field(None, max_length=2000)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return strip_required(v)


class ProfileResponse(CamelModel):
    id: str
    first_name: str
    last_name: str
    age: int
    message: Optional[str] = None
    avatar_url: Optional[str] = None
    professions: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    # Placement, filled in where the query joins it
    room_id: Optional[str] = None
    room_name: Optional[str] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None

    @classmethod
    def from_profile(cls, profile, **placement) -> "ProfileResponse":
        """Build from a Profile whose professions are already loaded"""
        return cls(
            id=str(profile.id),
            first_name=profile.first_name,
            last_name=profile.last_name,
            age=profile.age,
            message=profile.message,
            avatar_url=profile.avatar_url,
            professions=[p.name for p in profile.professions],
            created_at=profile.created_at,
            **placement,
        )


class ProfileMutationResponse(CamelModel):
    success: bool = True
    message: str
    profile: ProfileResponse


class ChangeGroupRequest(CamelModel):
    target_group_id: str = Field(..., min_length=1)


class AvatarResponse(CamelModel):
    success: bool = True
    message: str
    avatar_url: Optional[str] = None


class ProfessionResponse(CamelModel):
    id: str
    name: str
