# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.profile import Profile, Profession, ProfileProfessionMember
from app.models.group import Group, Subject, GroupSubject, ProfileGroupMember
from app.models.room import Room, ProfileRoomMember, GroupRoomAssignment
from app.models.notification import (
    Notification,
    NotificationType,
    NotificationPriority,
    Resolution,
    generate_notification_id,
)

__all__ = [
    # User
    "User",
    "UserRole",
    # Profiles
    "Profile",
    "Profession",
    "ProfileProfessionMember",
    # Groups
    "Group",
    "Subject",
    "GroupSubject",
    "ProfileGroupMember",
    # Rooms
    "Room",
    "ProfileRoomMember",
    "GroupRoomAssignment",
    # Notifications
    "Notification",
    "NotificationType",
    "NotificationPriority",
    "Resolution",
    "generate_notification_id",
]
