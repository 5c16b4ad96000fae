"""
Rooms API

Room CRUD plus seat allocation. Every admission path goes through
room_service, which locks the room row before counting seats.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.room import (
    RoomCreate,
    RoomUpdate,
    RoomResponse,
    RoomDetailResponse,
    RoomMutationResponse,
    AddMemberRequest,
    AddMemberResponse,
    BulkAddMembersRequest,
    BulkAddMembersResponse,
    AssignGroupsRequest,
    AssignGroupsResponse,
    RemoveMemberResponse,
    RemoveGroupResponse,
    AutoAssignResponse,
)
from app.services.room_service import room_service


router = APIRouter()


@router.get("", response_model=List[RoomResponse])
async def list_rooms(db: AsyncSession = Depends(get_db)):
    """All rooms with current occupancy"""
    return await room_service.list_rooms(db)


@router.post("/auto-assign", response_model=AutoAssignResponse)
async def auto_assign(db: AsyncSession = Depends(get_db)):
    """Seat every unseated profile, filling the emptiest rooms first"""
    return await room_service.auto_assign(db)


@router.get("/{room_id}", response_model=RoomDetailResponse)
async def get_room(room_id: str, db: AsyncSession = Depends(get_db)):
    """Room with its members and linked groups"""
    return await room_service.get_room_detail(db, room_id)


@router.post("", response_model=RoomMutationResponse, status_code=201)
async def create_room(room_data: RoomCreate, db: AsyncSession = Depends(get_db)):
    room = await room_service.create_room(db, room_data)
    return RoomMutationResponse(message="Room created successfully", room=room)


@router.put("/{room_id}", response_model=RoomMutationResponse)
async def update_room(
    room_id: str,
    room_data: RoomUpdate,
    db: AsyncSession = Depends(get_db)
):
    room = await room_service.update_room(db, room_id, room_data)
    return RoomMutationResponse(message="Room updated successfully", room=room)


@router.delete("/{room_id}", response_model=MessageResponse)
async def delete_room(room_id: str, db: AsyncSession = Depends(get_db)):
    name = await room_service.delete_room(db, room_id)
    return MessageResponse(message=f'Room "{name}" deleted successfully')


# ==================== Members ====================

@router.post("/{room_id}/members", response_model=AddMemberResponse)
async def add_member(
    room_id: str,
    request: AddMemberRequest,
    db: AsyncSession = Depends(get_db)
):
    return await room_service.add_member(db, room_id, request.profile_id)


@router.post("/{room_id}/members/bulk", response_model=BulkAddMembersResponse)
async def add_members_bulk(
    room_id: str,
    request: BulkAddMembersRequest,
    db: AsyncSession = Depends(get_db)
):
    """Seat as many of the given profiles as fit; the rest are skipped"""
    return await room_service.add_members_bulk(db, room_id, request.profile_ids)


@router.delete("/{room_id}/members/{profile_id}", response_model=RemoveMemberResponse)
async def remove_member(room_id: str, profile_id: str, db: AsyncSession = Depends(get_db)):
    return await room_service.remove_member(db, room_id, profile_id)


# ==================== Groups ====================

@router.post("/{room_id}/groups", response_model=AssignGroupsResponse)
async def assign_groups(
    room_id: str,
    request: AssignGroupsRequest,
    db: AsyncSession = Depends(get_db)
):
    """Seat whole groups; rejected if their members do not all fit"""
    return await room_service.assign_groups(db, room_id, request.group_ids)


@router.delete("/{room_id}/groups/{group_id}", response_model=RemoveGroupResponse)
async def remove_group(room_id: str, group_id: str, db: AsyncSession = Depends(get_db)):
    return await room_service.remove_group(db, room_id, group_id)
