"""Profiles and the professions attached to them"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.types import GUID, generate_uuid, utcnow


class Profile(Base):
    """A person that can be grouped and seated in a room"""
    __tablename__ = "profiles"

    __table_args__ = (
        Index('ix_profiles_name', 'first_name', 'last_name'),
    )

    # Ids may be supplied by the client, so no uuid coercion
    id = Column(GUID, primary_key=True, default=generate_uuid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    age = Column(Integer, default=18, nullable=False)
    message = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    professions = relationship(
        "Profession",
        secondary="profile_profession_members",
        order_by="Profession.name",
        viewonly=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Profile {self.full_name}>"


class Profession(Base):
    """Catalog entry such as 'Engineer' or 'Designer'"""
    __tablename__ = "professions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)

    def __repr__(self):
        return f"<Profession {self.name}>"


class ProfileProfessionMember(Base):
    """Many-to-many link between profiles and professions"""
    __tablename__ = "profile_profession_members"

    __table_args__ = (
        Index('ix_profile_profession_unique', 'profile_id', 'profession_id', unique=True),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    profile_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    profession_id = Column(GUID, ForeignKey("professions.id", ondelete="CASCADE"), nullable=False)

    def __repr__(self):
        return f"<ProfileProfessionMember {self.profile_id} -> {self.profession_id}>"
