"""Profile groups, their subjects and memberships"""
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class Subject(Base):
    """Catalog entry a group studies or works on"""
    __tablename__ = "subjects"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Subject {self.name}>"


class Group(Base):
    """Named collection of profiles sharing subjects"""
    __tablename__ = "profile_groups"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    subjects = relationship(
        "Subject",
        secondary="group_subjects",
        order_by="Subject.name",
        viewonly=True,
    )

    def __repr__(self):
        return f"<Group {self.name}>"


class GroupSubject(Base):
    """Many-to-many link between groups and subjects"""
    __tablename__ = "group_subjects"

    __table_args__ = (
        Index('ix_group_subjects_unique', 'group_id', 'subject_id', unique=True),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    group_id = Column(GUID, ForeignKey("profile_groups.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(GUID, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)


class ProfileGroupMember(Base):
    """Group membership. A profile belongs to at most one group."""
    __tablename__ = "profile_group_members"

    __table_args__ = (
        Index('ix_profile_group_members_group_id', 'group_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    group_id = Column(GUID, ForeignKey("profile_groups.id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)

    # Timestamps
    joined_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ProfileGroupMember {self.profile_id} in {self.group_id}>"
