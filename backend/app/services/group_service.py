"""
Group Service - groups, subjects and group membership

A profile belongs to at most one group (unique profile_id on
profile_group_members). Moving a profile into a group always goes through
apply_reassignment so its seat, if any, is retagged with the new group.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import List, Optional

from app.core.exceptions import (
    GroupNotFoundError,
    ProfileNotFoundError,
    ValidationError,
    ConflictError,
)
from app.core.logging_config import logger
from app.models import (
    Group,
    Subject,
    GroupSubject,
    Profile,
    ProfileGroupMember,
    ProfileRoomMember,
    GroupRoomAssignment,
    Room,
    Notification,
)
from app.schemas.group import (
    GroupCreate,
    GroupUpdate,
    GroupResponse,
    GroupDetailResponse,
    SubjectResponse,
)
from app.schemas.profile import ProfileResponse


async def apply_reassignment(db: AsyncSession, profile_id: str, target_group_id: str) -> None:
    """
    Move a profile into target_group_id. Does not commit.

    Drops membership in any other group, ensures the target membership
    exists, and retags the profile's seat with the target group. The seat is
    already held, so no capacity check is needed.
    """
    await db.execute(
        delete(ProfileGroupMember).where(
            and_(
                ProfileGroupMember.profile_id == profile_id,
                ProfileGroupMember.group_id != target_group_id,
            )
        )
    )

    existing = await db.execute(
        select(ProfileGroupMember.id).where(
            and_(
                ProfileGroupMember.profile_id == profile_id,
                ProfileGroupMember.group_id == target_group_id,
            )
        )
    )
    if existing.first() is None:
        db.add(ProfileGroupMember(group_id=target_group_id, profile_id=profile_id))

    await db.execute(
        update(ProfileRoomMember)
        .where(ProfileRoomMember.profile_id == profile_id)
        .values(group_id=target_group_id)
    )
    await db.flush()


class GroupService:
    """Service for managing groups"""

    async def get_group_or_404(self, db: AsyncSession, group_id: str) -> Group:
        result = await db.execute(select(Group).where(Group.id == group_id))
        group = result.scalar_one_or_none()
        if not group:
            raise GroupNotFoundError(group_id)
        return group

    # ==================== QUERIES ====================

    async def list_groups(self, db: AsyncSession) -> List[GroupResponse]:
        """All groups ordered by name, with member and subject counts"""
        member_counts = (
            select(ProfileGroupMember.group_id, func.count(ProfileGroupMember.id).label("cnt"))
            .group_by(ProfileGroupMember.group_id)
            .subquery()
        )
        subject_counts = (
            select(GroupSubject.group_id, func.count(GroupSubject.id).label("cnt"))
            .group_by(GroupSubject.group_id)
            .subquery()
        )
        result = await db.execute(
            select(
                Group,
                func.coalesce(member_counts.c.cnt, 0),
                func.coalesce(subject_counts.c.cnt, 0),
            )
            .outerjoin(member_counts, member_counts.c.group_id == Group.id)
            .outerjoin(subject_counts, subject_counts.c.group_id == Group.id)
            .order_by(Group.name)
        )
        return [
            GroupResponse(
                id=str(group.id),
                name=group.name,
                description=group.description,
                member_count=members,
                subject_count=subjects,
                created_at=group.created_at,
                updated_at=group.updated_at,
            )
            for group, members, subjects in result.all()
        ]

    async def get_group_detail(self, db: AsyncSession, group_id: str) -> GroupDetailResponse:
        """Group with members, subjects and the room it is linked to"""
        result = await db.execute(
            select(Group)
            .options(selectinload(Group.subjects))
            .where(Group.id == group_id)
            .execution_options(populate_existing=True)
        )
        group = result.scalar_one_or_none()
        if not group:
            raise GroupNotFoundError(group_id)

        members_result = await db.execute(
            select(Profile, Room.id, Room.name)
            .join(ProfileGroupMember, ProfileGroupMember.profile_id == Profile.id)
            .outerjoin(ProfileRoomMember, ProfileRoomMember.profile_id == Profile.id)
            .outerjoin(Room, Room.id == ProfileRoomMember.room_id)
            .where(ProfileGroupMember.group_id == group_id)
            .options(selectinload(Profile.professions))
            .execution_options(populate_existing=True)
            .order_by(Profile.first_name, Profile.last_name)
        )
        members = [
            ProfileResponse.from_profile(
                profile,
                room_id=str(room_id) if room_id else None,
                room_name=room_name,
                group_id=str(group.id),
                group_name=group.name,
            )
            for profile, room_id, room_name in members_result.all()
        ]

        room_result = await db.execute(
            select(Room.id, Room.name)
            .join(GroupRoomAssignment, GroupRoomAssignment.room_id == Room.id)
            .where(GroupRoomAssignment.group_id == group_id)
            .order_by(GroupRoomAssignment.assigned_at)
            .limit(1)
        )
        room_row = room_result.first()

        return GroupDetailResponse(
            id=str(group.id),
            name=group.name,
            description=group.description,
            member_count=len(members),
            subject_count=len(group.subjects),
            created_at=group.created_at,
            updated_at=group.updated_at,
            members=members,
            subjects=[
                SubjectResponse(id=str(s.id), name=s.name, description=s.description)
                for s in group.subjects
            ],
            assigned_room=room_row[1] if room_row else None,
            assigned_room_id=str(room_row[0]) if room_row else None,
        )

    async def get_group_subjects(self, db: AsyncSession, group_id: str) -> List[SubjectResponse]:
        await self.get_group_or_404(db, group_id)
        result = await db.execute(
            select(Subject)
            .join(GroupSubject, GroupSubject.subject_id == Subject.id)
            .where(GroupSubject.group_id == group_id)
            .order_by(Subject.name)
        )
        return [
            SubjectResponse(id=str(s.id), name=s.name, description=s.description)
            for s in result.scalars().all()
        ]

    async def list_subjects(self, db: AsyncSession) -> List[SubjectResponse]:
        result = await db.execute(select(Subject).order_by(Subject.name))
        return [
            SubjectResponse(id=str(s.id), name=s.name, description=s.description)
            for s in result.scalars().all()
        ]

    # ==================== VALIDATION HELPERS ====================

    async def _validate_subjects(self, db: AsyncSession, subject_ids: List[str]) -> List[str]:
        subject_ids = list(dict.fromkeys(subject_ids))
        if not subject_ids:
            raise ValidationError("At least one subject must be selected", field="subjectIds")

        result = await db.execute(select(Subject.id).where(Subject.id.in_(subject_ids)))
        if len(result.all()) != len(subject_ids):
            raise ValidationError("One or more invalid subject IDs provided", field="subjectIds")
        return subject_ids

    async def _validate_profiles(self, db: AsyncSession, profile_ids: List[str]) -> List[str]:
        profile_ids = list(dict.fromkeys(profile_ids))
        if not profile_ids:
            return []

        result = await db.execute(select(Profile.id).where(Profile.id.in_(profile_ids)))
        found = {str(pid) for pid in result.scalars().all()}
        for profile_id in profile_ids:
            if profile_id not in found:
                raise ProfileNotFoundError(profile_id)
        return profile_ids

    async def _ensure_unique_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(Group.id).where(func.lower(Group.name) == name.lower())
        if exclude_id:
            query = query.where(Group.id != exclude_id)
        existing = await db.execute(query)
        if existing.first():
            raise ConflictError("A group with this name already exists")

    async def _commit(self, db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("A group with this name already exists")

    # ==================== MUTATIONS ====================

    async def create_group(self, db: AsyncSession, group_data: GroupCreate) -> GroupResponse:
        """Create a group with its subjects and, optionally, initial members"""
        subject_ids = await self._validate_subjects(db, group_data.subject_ids)
        profile_ids = await self._validate_profiles(db, group_data.profile_ids)
        await self._ensure_unique_name(db, group_data.name)

        group = Group(name=group_data.name, description=group_data.description)
        db.add(group)
        await db.flush()

        for subject_id in subject_ids:
            db.add(GroupSubject(group_id=str(group.id), subject_id=subject_id))

        for profile_id in profile_ids:
            await apply_reassignment(db, profile_id, str(group.id))

        response = GroupResponse(
            id=str(group.id),
            name=group.name,
            description=group.description,
            member_count=len(profile_ids),
            subject_count=len(subject_ids),
            created_at=group.created_at,
            updated_at=group.updated_at,
        )
        await self._commit(db)

        logger.info(f"Created group {response.id} '{response.name}' with {len(profile_ids)} member(s)")
        return response

    async def update_group(self, db: AsyncSession, group_id: str, group_data: GroupUpdate) -> GroupResponse:
        """Replace a group's name, description, subjects and members"""
        group = await self.get_group_or_404(db, group_id)
        subject_ids = await self._validate_subjects(db, group_data.subject_ids)
        profile_ids = await self._validate_profiles(db, group_data.profile_ids)
        await self._ensure_unique_name(db, group_data.name, exclude_id=group_id)

        group.name = group_data.name
        group.description = group_data.description

        await db.execute(delete(GroupSubject).where(GroupSubject.group_id == group_id))
        for subject_id in subject_ids:
            db.add(GroupSubject(group_id=group_id, subject_id=subject_id))

        # Members leaving the group keep their seat as individuals
        leaving_filter = [ProfileGroupMember.group_id == group_id]
        if profile_ids:
            leaving_filter.append(ProfileGroupMember.profile_id.not_in(profile_ids))
        leaving_result = await db.execute(select(ProfileGroupMember.profile_id).where(*leaving_filter))
        leaving = [str(pid) for pid in leaving_result.scalars().all()]
        if leaving:
            await db.execute(
                update(ProfileRoomMember)
                .where(
                    and_(
                        ProfileRoomMember.group_id == group_id,
                        ProfileRoomMember.profile_id.in_(leaving),
                    )
                )
                .values(group_id=None)
            )
            await db.execute(
                delete(ProfileGroupMember).where(
                    and_(
                        ProfileGroupMember.group_id == group_id,
                        ProfileGroupMember.profile_id.in_(leaving),
                    )
                )
            )

        for profile_id in profile_ids:
            await apply_reassignment(db, profile_id, group_id)

        await db.flush()
        response = GroupResponse(
            id=str(group.id),
            name=group.name,
            description=group.description,
            member_count=len(profile_ids),
            subject_count=len(subject_ids),
            created_at=group.created_at,
            updated_at=group.updated_at,
        )
        await self._commit(db)

        logger.info(f"Updated group {group_id}: {len(profile_ids)} member(s), {len(subject_ids)} subject(s)")
        return response

    async def delete_group(self, db: AsyncSession, group_id: str) -> str:
        """
        Delete a group. Its members stay seated, as individuals, and any
        notification referencing it loses the reference.
        """
        group = await self.get_group_or_404(db, group_id)
        name = group.name

        await db.execute(
            update(ProfileRoomMember)
            .where(ProfileRoomMember.group_id == group_id)
            .values(group_id=None)
        )
        await db.execute(delete(GroupRoomAssignment).where(GroupRoomAssignment.group_id == group_id))
        await db.execute(delete(ProfileGroupMember).where(ProfileGroupMember.group_id == group_id))
        await db.execute(delete(GroupSubject).where(GroupSubject.group_id == group_id))
        await db.execute(
            update(Notification).where(Notification.group_id == group_id).values(group_id=None)
        )
        await db.delete(group)
        await db.commit()

        logger.info(f"Deleted group {group_id} '{name}'")
        return name

    async def reassign_profile(self, db: AsyncSession, profile_id: str, target_group_id: str) -> None:
        """Move a profile into another group and commit"""
        profile = await db.get(Profile, profile_id)
        if not profile:
            raise ProfileNotFoundError(profile_id)
        await self.get_group_or_404(db, target_group_id)

        await apply_reassignment(db, profile_id, target_group_id)
        await db.commit()

        logger.info(f"Moved profile {profile_id} to group {target_group_id}")


# Singleton instance
group_service = GroupService()
