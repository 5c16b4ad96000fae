"""
Notification Service - feed entries and group join requests

A group_request notification carries profile_id and group_id. Approving it
moves the profile into that group (see group_service.apply_reassignment)
in the same transaction that marks the request resolved.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete, update
from typing import List

from app.core.exceptions import (
    NotificationNotFoundError,
    ProfileNotFoundError,
    GroupNotFoundError,
    RoomNotFoundError,
    UserNotFoundError,
    ValidationError,
    ConflictError,
)
from app.core.logging_config import logger
from app.core.types import utcnow
from app.models import (
    Notification,
    NotificationType,
    NotificationPriority,
    Resolution,
    Profile,
    Group,
    Room,
    User,
)
from app.schemas.notification import (
    NotificationCreate,
    GroupRequestCreate,
    NotificationResponse,
    NotificationCountResponse,
    ProfileInfo,
    ResolveActionEnum,
)
from app.services.group_service import apply_reassignment


class NotificationService:
    """Service for the notification feed"""

    async def list_notifications(self, db: AsyncSession) -> List[NotificationResponse]:
        """Newest first, with the referenced profile, group and room names"""
        result = await db.execute(
            select(
                Notification,
                Profile.first_name,
                Profile.last_name,
                Profile.avatar_url,
                Group.name,
                Room.name,
            )
            .outerjoin(Profile, Profile.id == Notification.profile_id)
            .outerjoin(Group, Group.id == Notification.group_id)
            .outerjoin(Room, Room.id == Notification.room_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .execution_options(populate_existing=True)
        )

        notifications = []
        for n, first_name, last_name, avatar_url, group_name, room_name in result.all():
            profile_info = None
            if n.profile_id:
                full_name = " ".join(part for part in (first_name, last_name) if part) or None
                profile_info = ProfileInfo(
                    id=str(n.profile_id),
                    first_name=first_name,
                    last_name=last_name,
                    full_name=full_name,
                    avatar_url=avatar_url,
                )
            notifications.append(NotificationResponse(
                id=n.id,
                type=n.type,
                title=n.title,
                message=n.message,
                priority=n.priority,
                read=n.read_status,
                resolved=n.resolved,
                resolution=n.resolution,
                created_at=n.created_at,
                resolved_at=n.resolved_at,
                profile_info=profile_info,
                group_name=group_name,
                room_name=room_name,
            ))
        return notifications

    async def get_counts(self, db: AsyncSession) -> NotificationCountResponse:
        total = await db.execute(select(func.count(Notification.id)))
        unread = await db.execute(
            select(func.count(Notification.id)).where(Notification.read_status.is_(False))
        )
        pending = await db.execute(
            select(func.count(Notification.id)).where(
                Notification.type == NotificationType.GROUP_REQUEST.value,
                Notification.resolved.is_(False),
            )
        )
        return NotificationCountResponse(
            total_count=total.scalar_one(),
            unread_count=unread.scalar_one(),
            pending_requests=pending.scalar_one(),
        )

    async def _check_references(self, db: AsyncSession, data: NotificationCreate) -> None:
        """Every id the notification points at must exist"""
        checks = (
            (Profile, data.profile_id, ProfileNotFoundError),
            (Group, data.group_id, GroupNotFoundError),
            (Room, data.room_id, RoomNotFoundError),
            (User, data.user_id, UserNotFoundError),
        )
        for model, ref_id, not_found in checks:
            if ref_id is not None and await db.get(model, ref_id) is None:
                raise not_found(ref_id)

    async def create_notification(self, db: AsyncSession, data: NotificationCreate) -> str:
        if data.type == NotificationType.GROUP_REQUEST.value and not (data.profile_id and data.group_id):
            raise ValidationError(
                "A group request needs both profileId and groupId", field="profileId"
            )
        await self._check_references(db, data)

        notification = Notification(
            type=data.type,
            title=data.title,
            message=data.message,
            priority=data.priority,
            profile_id=data.profile_id,
            group_id=data.group_id,
            room_id=data.room_id,
            user_id=data.user_id,
        )
        db.add(notification)
        await db.flush()
        notification_id = notification.id
        await db.commit()

        logger.info(f"Created notification {notification_id} ({data.type})")
        return notification_id

    async def create_group_request(self, db: AsyncSession, data: GroupRequestCreate) -> str:
        """Raise a join request for a profile and a group, both of which must exist"""
        profile = await db.get(Profile, data.profile_id)
        if not profile:
            raise ProfileNotFoundError(data.profile_id)
        group = await db.get(Group, data.group_id)
        if not group:
            raise GroupNotFoundError(data.group_id)

        message = data.message or (
            f'{profile.first_name} {profile.last_name} wants to join the "{group.name}" group'
        )
        notification = Notification(
            type=NotificationType.GROUP_REQUEST.value,
            title="Group Join Request",
            message=message,
            priority=NotificationPriority.NORMAL.value,
            profile_id=data.profile_id,
            group_id=data.group_id,
        )
        db.add(notification)
        await db.flush()
        notification_id = notification.id
        await db.commit()

        logger.info(f"Group join request {notification_id}: profile {data.profile_id} -> group {data.group_id}")
        return notification_id

    async def resolve_group_request(self, db: AsyncSession, notification_id: str,
                                    action: ResolveActionEnum) -> str:
        """
        Approve or deny a pending join request.

        Only group_request notifications can be resolved, and only once.
        Approval and the status change commit together.
        """
        result = await db.execute(
            select(Notification)
            .where(
                Notification.id == notification_id,
                Notification.type == NotificationType.GROUP_REQUEST.value,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotificationNotFoundError(notification_id)
        if notification.resolved:
            raise ConflictError(
                f"Group request already {notification.resolution or 'resolved'}",
                details={"resolution": notification.resolution},
            )

        approved = action == ResolveActionEnum.APPROVE
        if approved and notification.profile_id and notification.group_id:
            profile_id, group_id = str(notification.profile_id), str(notification.group_id)
            if not await db.get(Profile, profile_id):
                raise ProfileNotFoundError(profile_id)
            if not await db.get(Group, group_id):
                raise GroupNotFoundError(group_id)
            await apply_reassignment(db, profile_id, group_id)

        resolution = Resolution.APPROVED if approved else Resolution.DENIED
        now = utcnow()
        notification.resolved = True
        notification.resolution = resolution.value
        notification.resolved_at = now
        notification.read_status = True
        notification.updated_at = now
        await db.commit()

        logger.info(f"Group request {notification_id} {resolution.value}")
        return resolution.value

    async def mark_read(self, db: AsyncSession, notification_id: str) -> None:
        notification = await db.get(Notification, notification_id)
        if not notification:
            raise NotificationNotFoundError(notification_id)
        notification.read_status = True
        await db.commit()

    async def mark_all_read(self, db: AsyncSession) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.read_status.is_(False))
            .values(read_status=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount

    async def delete_notification(self, db: AsyncSession, notification_id: str) -> None:
        notification = await db.get(Notification, notification_id)
        if not notification:
            raise NotificationNotFoundError(notification_id)
        await db.delete(notification)
        await db.commit()

    async def clear_all(self, db: AsyncSession) -> int:
        result = await db.execute(delete(Notification))
        await db.commit()
        logger.info(f"Cleared {result.rowcount} notifications")
        return result.rowcount


# Singleton instance
notification_service = NotificationService()
