"""Rooms, seats and group-to-room linkage"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index, CheckConstraint

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class Room(Base):
    """Capacity-limited container profiles are seated into.

    The seat count is never stored: it is always counted from
    profile_room_members while the room row is locked.
    """
    __tablename__ = "rooms"

    __table_args__ = (
        CheckConstraint('max_capacity >= 0', name='ck_rooms_max_capacity_non_negative'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    max_capacity = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Room {self.name} ({self.max_capacity})>"


class ProfileRoomMember(Base):
    """A seat. group_id records the group that brought the profile in, if any."""
    __tablename__ = "profile_room_members"

    __table_args__ = (
        Index('ix_profile_room_members_room_id', 'room_id'),
        Index('ix_profile_room_members_room_group', 'room_id', 'group_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    room_id = Column(GUID, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    group_id = Column(GUID, ForeignKey("profile_groups.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ProfileRoomMember {self.profile_id} in {self.room_id}>"


class GroupRoomAssignment(Base):
    """Records that a group was seated into a room as a unit"""
    __tablename__ = "group_room_members"

    __table_args__ = (
        Index('ix_group_room_members_unique', 'group_id', 'room_id', unique=True),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    group_id = Column(GUID, ForeignKey("profile_groups.id", ondelete="CASCADE"), nullable=False)
    room_id = Column(GUID, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)

    # Timestamps
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<GroupRoomAssignment {self.group_id} -> {self.room_id}>"
