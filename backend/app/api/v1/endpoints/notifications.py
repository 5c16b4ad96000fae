from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.notification import (
    NotificationCreate,
    GroupRequestCreate,
    ResolveRequest,
    NotificationResponse,
    NotificationCountResponse,
    NotificationCreatedResponse,
)
from app.services.notification_service import notification_service


router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(db: AsyncSession = Depends(get_db)):
    """Notification feed, newest first"""
    return await notification_service.list_notifications(db)


@router.get("/count", response_model=NotificationCountResponse)
async def get_notification_counts(db: AsyncSession = Depends(get_db)):
    return await notification_service.get_counts(db)


@router.post("", response_model=NotificationCreatedResponse, status_code=201)
async def create_notification(data: NotificationCreate, db: AsyncSession = Depends(get_db)):
    notification_id = await notification_service.create_notification(db, data)
    return NotificationCreatedResponse(
        message="Notification created successfully",
        notification_id=notification_id,
    )


@router.post("/group-request", response_model=NotificationCreatedResponse, status_code=201)
async def create_group_request(data: GroupRequestCreate, db: AsyncSession = Depends(get_db)):
    """Ask for a profile to be moved into a group; resolved by an admin"""
    notification_id = await notification_service.create_group_request(db, data)
    return NotificationCreatedResponse(
        message="Group request submitted successfully",
        notification_id=notification_id,
    )


@router.put("/read-all", response_model=MessageResponse)
async def mark_all_read(db: AsyncSession = Depends(get_db)):
    updated = await notification_service.mark_all_read(db)
    return MessageResponse(message=f"{updated} notifications marked as read")


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(notification_id: str, db: AsyncSession = Depends(get_db)):
    await notification_service.mark_read(db, notification_id)
    return MessageResponse(message="Notification marked as read")


@router.put("/{notification_id}/resolve", response_model=MessageResponse)
async def resolve_group_request(
    notification_id: str,
    request: ResolveRequest,
    db: AsyncSession = Depends(get_db)
):
    """Approve (moves the profile into the group) or deny a join request"""
    resolution = await notification_service.resolve_group_request(db, notification_id, request.action)
    return MessageResponse(message=f"Group request {resolution} successfully")


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: str, db: AsyncSession = Depends(get_db)):
    await notification_service.delete_notification(db, notification_id)
    return MessageResponse(message="Notification deleted successfully")


@router.delete("", response_model=MessageResponse)
async def clear_notifications(db: AsyncSession = Depends(get_db)):
    cleared = await notification_service.clear_all(db)
    return MessageResponse(message=f"{cleared} notifications cleared")
