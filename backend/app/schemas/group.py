"""Pydantic schemas for groups and the subject catalog"""
from pydantic import Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import CamelModel, strip_required, strip_optional
from app.schemas.profile import ProfileResponse


class GroupCreate(CamelModel):
    """Create a group. subject_ids must name at least one existing subject."""
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    subject_ids: List[str] = Field(default_factory=list)
    profile_ids: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("description")
    @classmethod
    def trim_description(cls, v: Optional[str]) -> Optional[str]:
        return strip_optional(v)


class GroupUpdate(GroupCreate):
    """Replace name, description, subjects and members of a group"""
    pass


class SubjectResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class GroupResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    member_count: int = 0
    subject_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GroupDetailResponse(GroupResponse):
    members: List[ProfileResponse] = Field(default_factory=list)
    subjects: List[SubjectResponse] = Field(default_factory=list)
    assigned_room: Optional[str] = None
    assigned_room_id: Optional[str] = None


class GroupMutationResponse(CamelModel):
    success: bool = True
    message: str
    group: GroupResponse
