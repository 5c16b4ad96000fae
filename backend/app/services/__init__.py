from app.services.avatar_storage import AvatarStorage, avatar_storage
from app.services.room_service import RoomService, room_service
from app.services.group_service import GroupService, group_service
from app.services.profile_service import ProfileService, profile_service
from app.services.notification_service import NotificationService, notification_service

__all__ = [
    "AvatarStorage",
    "avatar_storage",
    "RoomService",
    "room_service",
    "GroupService",
    "group_service",
    "ProfileService",
    "profile_service",
    "NotificationService",
    "notification_service",
]
