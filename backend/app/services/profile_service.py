"""
Profile Service - profiles, their professions and avatars

Handles:
- Profile CRUD with room/group placement in every listing
- Linking professions by name (case-insensitive; unknown names are skipped)
- Avatar upload/removal through avatar_storage
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import List, Optional

from app.core.exceptions import ProfileNotFoundError, GroupNotFoundError, ConflictError
from app.core.logging_config import logger
from app.models import (
    Profile,
    Profession,
    ProfileProfessionMember,
    Group,
    ProfileGroupMember,
    Room,
    ProfileRoomMember,
    User,
    Notification,
)
from app.schemas.profile import ProfileCreate, ProfileUpdate, ProfileResponse, ProfessionResponse
from app.services.avatar_storage import avatar_storage
from app.services.room_service import release_seat


def _placement_query():
    """Profiles joined with their seat and group (each at most one)"""
    return (
        select(Profile, Room.id, Room.name, Group.id, Group.name)
        .outerjoin(ProfileRoomMember, ProfileRoomMember.profile_id == Profile.id)
        .outerjoin(Room, Room.id == ProfileRoomMember.room_id)
        .outerjoin(ProfileGroupMember, ProfileGroupMember.profile_id == Profile.id)
        .outerjoin(Group, Group.id == ProfileGroupMember.group_id)
        .options(selectinload(Profile.professions))
        .execution_options(populate_existing=True)
    )


def _build_rows(rows) -> List[ProfileResponse]:
    return [
        ProfileResponse.from_profile(
            profile,
            room_id=str(room_id) if room_id else None,
            room_name=room_name,
            group_id=str(group_id) if group_id else None,
            group_name=group_name,
        )
        for profile, room_id, room_name, group_id, group_name in rows
    ]


class ProfileService:
    """Service for managing profiles"""

    # ==================== QUERIES ====================

    async def list_profiles(self, db: AsyncSession) -> List[ProfileResponse]:
        """All profiles, newest first"""
        result = await db.execute(
            _placement_query().order_by(Profile.created_at.desc(), Profile.last_name)
        )
        return _build_rows(result.all())

    async def list_unassigned(self, db: AsyncSession) -> List[ProfileResponse]:
        """Profiles that belong to no group"""
        result = await db.execute(
            _placement_query()
            .where(ProfileGroupMember.id.is_(None))
            .order_by(Profile.first_name, Profile.last_name)
        )
        return _build_rows(result.all())

    async def list_available(self, db: AsyncSession) -> List[ProfileResponse]:
        """Profiles without a seat in any room"""
        result = await db.execute(
            _placement_query()
            .where(ProfileRoomMember.id.is_(None))
            .order_by(Profile.first_name, Profile.last_name)
        )
        return _build_rows(result.all())

    async def list_available_for_group(self, db: AsyncSession, group_id: str) -> List[ProfileResponse]:
        """Profiles a group editor may pick: ungrouped ones plus the group's own members"""
        group = await db.get(Group, group_id)
        if not group:
            raise GroupNotFoundError(group_id)

        result = await db.execute(
            _placement_query()
            .where(or_(ProfileGroupMember.id.is_(None), ProfileGroupMember.group_id == group_id))
            .order_by(Profile.first_name, Profile.last_name)
        )
        return _build_rows(result.all())

    async def get_profile(self, db: AsyncSession, profile_id: str) -> ProfileResponse:
        result = await db.execute(_placement_query().where(Profile.id == profile_id))
        row = result.first()
        if not row:
            raise ProfileNotFoundError(profile_id)
        return _build_rows([row])[0]

    async def list_professions(self, db: AsyncSession) -> List[ProfessionResponse]:
        result = await db.execute(select(Profession).order_by(Profession.name))
        return [ProfessionResponse(id=str(p.id), name=p.name) for p in result.scalars().all()]

    # ==================== HELPERS ====================

    async def _get_profile_or_404(self, db: AsyncSession, profile_id: str) -> Profile:
        profile = await db.get(Profile, profile_id)
        if not profile:
            raise ProfileNotFoundError(profile_id)
        return profile

    async def _set_professions(self, db: AsyncSession, profile_id: str, names: List[str]) -> List[str]:
        """Replace the profile's professions, matching names case-insensitively"""
        await db.execute(
            delete(ProfileProfessionMember).where(ProfileProfessionMember.profile_id == profile_id)
        )

        linked: List[str] = []
        seen = set()
        for raw_name in names:
            name = (raw_name or "").strip()
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())

            result = await db.execute(
                select(Profession).where(func.lower(Profession.name) == name.lower())
            )
            profession = result.scalars().first()
            if not profession:
                logger.warning(f"Profession '{name}' not found, skipped for profile {profile_id}")
                continue

            db.add(ProfileProfessionMember(profile_id=profile_id, profession_id=str(profession.id)))
            linked.append(profession.name)
        return linked

    # ==================== MUTATIONS ====================

    async def create_profile(self, db: AsyncSession, profile_data: ProfileCreate) -> ProfileResponse:
        if profile_data.id:
            existing = await db.get(Profile, profile_data.id)
            if existing:
                raise ConflictError("A profile with this id already exists")

        profile = Profile(
            first_name=profile_data.first_name,
            last_name=profile_data.last_name,
            age=profile_data.age if profile_data.age is not None else 18,
            message=profile_data.message,
            avatar_url=profile_data.avatar_url,
        )
        if profile_data.id:
            profile.id = profile_data.id
        db.add(profile)

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("A profile with this id already exists")

        profile_id = str(profile.id)
        await self._set_professions(db, profile_id, profile_data.professions)
        await db.commit()

        logger.info(f"Created profile {profile_id} ({profile_data.first_name} {profile_data.last_name})")
        return await self.get_profile(db, profile_id)

    async def update_profile(self, db: AsyncSession, profile_id: str,
                             profile_data: ProfileUpdate) -> ProfileResponse:
        """Apply the fields that were sent; professions, when sent, replace the set"""
        profile = await self._get_profile_or_404(db, profile_id)
        fields = profile_data.model_fields_set

        if profile_data.first_name is not None:
            profile.first_name = profile_data.first_name
        if profile_data.last_name is not None:
            profile.last_name = profile_data.last_name
        if "age" in fields:
            profile.age = profile_data.age if profile_data.age is not None else 18
        if "message" in fields:
            profile.message = profile_data.message
        if "avatar_url" in fields:
            profile.avatar_url = profile_data.avatar_url
        if profile_data.professions is not None:
            await self._set_professions(db, profile_id, profile_data.professions)

        await db.commit()

        logger.info(f"Updated profile {profile_id}")
        return await self.get_profile(db, profile_id)

    async def delete_profile(self, db: AsyncSession, profile_id: str) -> None:
        """Delete a profile, freeing its seat and leaving its group"""
        profile = await self._get_profile_or_404(db, profile_id)
        avatar_url = profile.avatar_url

        seat_result = await db.execute(
            select(ProfileRoomMember).where(ProfileRoomMember.profile_id == profile_id)
        )
        seat = seat_result.scalar_one_or_none()
        if seat:
            await release_seat(db, seat)

        await db.execute(delete(ProfileGroupMember).where(ProfileGroupMember.profile_id == profile_id))
        await db.execute(
            delete(ProfileProfessionMember).where(ProfileProfessionMember.profile_id == profile_id)
        )
        await db.execute(update(User).where(User.profile_id == profile_id).values(profile_id=None))
        await db.execute(
            update(Notification).where(Notification.profile_id == profile_id).values(profile_id=None)
        )
        await db.delete(profile)
        await db.commit()

        await avatar_storage.delete(avatar_url)
        logger.info(f"Deleted profile {profile_id}")

    async def set_avatar(self, db: AsyncSession, profile_id: str, filename: Optional[str],
                         content_type: Optional[str], content: bytes) -> str:
        """Store a new avatar, point the profile at it and drop the previous file"""
        profile = await self._get_profile_or_404(db, profile_id)
        old_url = profile.avatar_url

        avatar_storage.validate(content_type, len(content))
        new_url = await avatar_storage.save(profile_id, filename, content_type, content)

        profile.avatar_url = new_url
        try:
            await db.commit()
        except Exception:
            await avatar_storage.delete(new_url)
            raise

        if old_url and old_url != new_url:
            await avatar_storage.delete(old_url)
        return new_url

    async def remove_avatar(self, db: AsyncSession, profile_id: str) -> None:
        profile = await self._get_profile_or_404(db, profile_id)
        old_url = profile.avatar_url

        profile.avatar_url = None
        await db.commit()

        await avatar_storage.delete(old_url)
        logger.info(f"Removed avatar of profile {profile_id}")


# Singleton instance
profile_service = ProfileService()
