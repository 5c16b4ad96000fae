from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.group import (
    GroupCreate,
    GroupUpdate,
    GroupResponse,
    GroupDetailResponse,
    GroupMutationResponse,
    SubjectResponse,
)
from app.services.group_service import group_service


router = APIRouter()


@router.get("", response_model=List[GroupResponse])
async def list_groups(db: AsyncSession = Depends(get_db)):
    """All groups with member and subject counts"""
    return await group_service.list_groups(db)


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(group_id: str, db: AsyncSession = Depends(get_db)):
    """Group with its members, subjects and assigned room"""
    return await group_service.get_group_detail(db, group_id)


@router.get("/{group_id}/subjects", response_model=List[SubjectResponse])
async def get_group_subjects(group_id: str, db: AsyncSession = Depends(get_db)):
    return await group_service.get_group_subjects(db, group_id)


@router.post("", response_model=GroupMutationResponse, status_code=201)
async def create_group(group_data: GroupCreate, db: AsyncSession = Depends(get_db)):
    group = await group_service.create_group(db, group_data)
    return GroupMutationResponse(message="Group created successfully", group=group)


@router.put("/{group_id}", response_model=GroupMutationResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    db: AsyncSession = Depends(get_db)
):
    group = await group_service.update_group(db, group_id, group_data)
    return GroupMutationResponse(message="Group updated successfully", group=group)


@router.delete("/{group_id}", response_model=MessageResponse)
async def delete_group(group_id: str, db: AsyncSession = Depends(get_db)):
    name = await group_service.delete_group(db, group_id)
    return MessageResponse(message=f'Group "{name}" deleted successfully')
