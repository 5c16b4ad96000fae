"""
Profiles API

Profile CRUD, group changes and avatar upload. Fixed paths are declared
before /{profile_id} so they are not captured as ids.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.profile import (
    ProfileCreate,
    ProfileUpdate,
    ProfileResponse,
    ProfileMutationResponse,
    ChangeGroupRequest,
    AvatarResponse,
)
from app.services.profile_service import profile_service
from app.services.group_service import group_service


router = APIRouter()


@router.get("", response_model=List[ProfileResponse])
async def list_profiles(db: AsyncSession = Depends(get_db)):
    """All profiles with their room and group"""
    return await profile_service.list_profiles(db)


@router.get("/unassigned", response_model=List[ProfileResponse])
async def list_unassigned_profiles(db: AsyncSession = Depends(get_db)):
    """Profiles that belong to no group"""
    return await profile_service.list_unassigned(db)


@router.get("/available", response_model=List[ProfileResponse])
async def list_available_profiles(db: AsyncSession = Depends(get_db)):
    """Profiles without a room"""
    return await profile_service.list_available(db)


@router.get("/available-for-group/{group_id}", response_model=List[ProfileResponse])
async def list_profiles_available_for_group(group_id: str, db: AsyncSession = Depends(get_db)):
    return await profile_service.list_available_for_group(db, group_id)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile_id: str, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_profile(db, profile_id)


@router.post("", response_model=ProfileMutationResponse, status_code=201)
async def create_profile(profile_data: ProfileCreate, db: AsyncSession = Depends(get_db)):
    profile = await profile_service.create_profile(db, profile_data)
    return ProfileMutationResponse(message="Profile created successfully", profile=profile)


@router.put("/{profile_id}", response_model=ProfileMutationResponse)
async def update_profile(
    profile_id: str,
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db)
):
    profile = await profile_service.update_profile(db, profile_id, profile_data)
    return ProfileMutationResponse(message="Profile updated successfully", profile=profile)


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_profile(profile_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a profile, freeing its seat"""
    await profile_service.delete_profile(db, profile_id)
    return MessageResponse(message="Profile deleted successfully")


@router.put("/{profile_id}/group", response_model=MessageResponse)
async def change_profile_group(
    profile_id: str,
    request: ChangeGroupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Move a profile into another group, retagging its seat"""
    await group_service.reassign_profile(db, profile_id, request.target_group_id)
    return MessageResponse(message="Profile moved to the new group successfully")


# ==================== Avatar ====================

@router.post("/{profile_id}/avatar", response_model=AvatarResponse)
async def upload_avatar(
    profile_id: str,
    avatar: UploadFile = File(...),
    db: AsyncSession = Depends(get_db)
):
    """Upload an avatar image (jpeg, png, webp or gif) replacing the current one"""
    content = await avatar.read()
    avatar_url = await profile_service.set_avatar(
        db, profile_id, avatar.filename, avatar.content_type, content
    )
    return AvatarResponse(message="Avatar uploaded successfully", avatar_url=avatar_url)


@router.delete("/{profile_id}/avatar", response_model=AvatarResponse)
async def delete_avatar(profile_id: str, db: AsyncSession = Depends(get_db)):
    await profile_service.remove_avatar(db, profile_id)
    return AvatarResponse(message="Avatar removed successfully")
