"""Notification feed entries, including group join requests"""
from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, Index
import enum
import secrets
import time

from app.core.database import Base
from app.core.types import GUID, utcnow


class NotificationType(str, enum.Enum):
    """Known notification types. Other values are stored as given."""
    GENERAL = "general"
    GROUP_REQUEST = "group_request"


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Resolution(str, enum.Enum):
    APPROVED = "approved"
    DENIED = "denied"


def generate_notification_id() -> str:
    """Sortable id of the form notif_<millis>_<random>"""
    return f"notif_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class Notification(Base):
    """Notification model"""
    __tablename__ = "notifications"

    __table_args__ = (
        Index('ix_notifications_created_at', 'created_at'),
        Index('ix_notifications_type_resolved', 'type', 'resolved'),
    )

    id = Column(String(64), primary_key=True, default=generate_notification_id)
    type = Column(String(50), default=NotificationType.GENERAL.value, nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(20), default=NotificationPriority.NORMAL.value, nullable=False)

    # Optional references; kept when the target row is deleted
    profile_id = Column(GUID, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    group_id = Column(GUID, ForeignKey("profile_groups.id", ondelete="SET NULL"), nullable=True)
    room_id = Column(GUID, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    read_status = Column(Boolean, default=False, nullable=False)
    resolved = Column(Boolean, default=False, nullable=False)
    resolution = Column(String(20), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    resolved_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Notification {self.type}: {self.title}>"
