from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRoleEnum(str, Enum):
    ADMIN = "admin"
    USER = "user"


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRoleEnum = UserRoleEnum.USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: str
    email: str
    role: UserRoleEnum
    is_active: bool = True
    profile_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Returned by register and login"""
    success: bool = True
    message: str
    user: UserResponse
    redirect_url: str = Field(..., serialization_alias="redirectUrl")
    access_token: str
    token_type: str = "bearer"


class LinkProfileRequest(BaseModel):
    profile_id: Optional[str] = Field(None, alias="profileId")

    model_config = ConfigDict(populate_by_name=True)
