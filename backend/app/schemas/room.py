"""Pydantic schemas for rooms and seat allocation"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import CamelModel, strip_required, strip_optional
from app.schemas.profile import ProfileResponse


class RoomCreate(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    max_capacity: int = Field(..., ge=0, le=10000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("description")
    @classmethod
    def trim_description(cls, v: Optional[str]) -> Optional[str]:
        return strip_optional(v)


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    max_capacity: Optional[int] = Field(None, ge=0, le=10000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return strip_required(v)


class RoomResponse(BaseModel):
    """Room with its live occupancy. Keys stay snake_case."""
    id: str
    name: str
    description: Optional[str] = None
    max_capacity: int
    current_count: int = 0
    available_spots: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AssignedGroupResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    member_count: int = 0


class RoomDetailResponse(RoomResponse):
    members: List[ProfileResponse] = Field(default_factory=list)
    member_count: int = Field(0, serialization_alias="memberCount")
    assigned_groups: List[AssignedGroupResponse] = Field(
        default_factory=list, serialization_alias="assignedGroups"
    )


class RoomMutationResponse(CamelModel):
    success: bool = True
    message: str
    room: RoomResponse


# ==================== Seat allocation ====================

class AddMemberRequest(CamelModel):
    profile_id: str = Field(..., min_length=1)


class BulkAddMembersRequest(CamelModel):
    profile_ids: List[str] = Field(default_factory=list)


class AssignGroupsRequest(CamelModel):
    group_ids: List[str] = Field(default_factory=list)


class SeatedProfile(CamelModel):
    id: str
    first_name: str
    last_name: str


class AddMemberResponse(CamelModel):
    success: bool = True
    message: str
    current_count: int
    max_capacity: int


class BulkAddMembersResponse(CamelModel):
    success: bool = True
    message: str
    assigned_profiles: List[SeatedProfile] = Field(default_factory=list)
    skipped_count: int = 0


class AssignGroupsResponse(CamelModel):
    success: bool = True
    message: str
    groups_assigned: int = 0
    members_added: int = 0


class RemoveMemberResponse(CamelModel):
    success: bool = True
    message: str
    group_removed: bool = False


class RemoveGroupResponse(CamelModel):
    success: bool = True
    message: str
    members_removed: int = 0


class AutoAssignment(CamelModel):
    profile_id: str
    profile_name: str
    room_id: str
    room_name: str


class AutoAssignResponse(CamelModel):
    success: bool = True
    message: str
    assigned: List[AutoAssignment] = Field(default_factory=list)
    unassigned_remaining: int = 0
