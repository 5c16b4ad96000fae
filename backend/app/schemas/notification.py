"""Pydantic schemas for the notification feed"""
from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum

from app.schemas.common import CamelModel, strip_required, strip_optional


class ResolveActionEnum(str, Enum):
    APPROVE = "approve"
    DENY = "deny"


class NotificationCreate(CamelModel):
    type: str = Field("general", min_length=1, max_length=50)
    title: str = Field(..., max_length=255)
    message: str = Field(..., max_length=5000)
    priority: str = Field("normal", min_length=1, max_length=20)
    profile_id: Optional[str] = None
    group_id: Optional[str] = None
    room_id: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("title", "message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return strip_required(v)


class GroupRequestCreate(CamelModel):
    profile_id: str = Field(..., min_length=1)
    group_id: str = Field(..., min_length=1)
    message: Optional[str] = Field(None, max_length=5000)

    @field_validator("message")
    @classmethod
    def trim_message(cls, v: Optional[str]) -> Optional[str]:
        return strip_optional(v)


class ResolveRequest(CamelModel):
    action: ResolveActionEnum


class ProfileInfo(CamelModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class NotificationResponse(CamelModel):
    id: str
    type: str
    title: str
    message: str
    priority: str
    read: bool = False
    resolved: bool = False
    resolution: Optional[str] = None
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    profile_info: Optional[ProfileInfo] = None
    group_name: Optional[str] = None
    room_name: Optional[str] = None


class NotificationCountResponse(CamelModel):
    total_count: int = 0
    unread_count: int = 0
    pending_requests: int = 0


class NotificationCreatedResponse(CamelModel):
    success: bool = True
    message: str
    notification_id: str
