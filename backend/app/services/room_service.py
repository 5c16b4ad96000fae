"""
Room Service - rooms and capacity-checked seat allocation

Handles:
- Room CRUD with live occupancy
- Seating single profiles, bulk lists and whole groups
- Group-room linkage and its cascading removal
- Greedy auto-assignment of unseated profiles

Every operation that adds seats locks the room row (SELECT ... FOR UPDATE)
before counting its seats, then writes and commits in the same transaction,
so concurrent writers on one room are serialized and
count(seats) <= max_capacity holds after each commit.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import Dict, List, Optional, Tuple

from app.core.exceptions import (
    RoomNotFoundError,
    ProfileNotFoundError,
    GroupNotFoundError,
    ResourceNotFoundError,
    ValidationError,
    ConflictError,
    CapacityExceededError,
)
from app.core.logging_config import logger
from app.models import (
    Room,
    Profile,
    Group,
    ProfileGroupMember,
    ProfileRoomMember,
    GroupRoomAssignment,
    Notification,
)
from app.schemas.profile import ProfileResponse
from app.schemas.room import (
    RoomCreate,
    RoomUpdate,
    RoomResponse,
    RoomDetailResponse,
    AssignedGroupResponse,
    AddMemberResponse,
    BulkAddMembersResponse,
    AssignGroupsResponse,
    RemoveMemberResponse,
    RemoveGroupResponse,
    SeatedProfile,
    AutoAssignment,
    AutoAssignResponse,
)


def build_room_response(room: Room, current_count: int) -> RoomResponse:
    """Build RoomResponse from Room model and its seat count"""
    return RoomResponse(
        id=str(room.id),
        name=room.name,
        description=room.description,
        max_capacity=room.max_capacity,
        current_count=current_count,
        available_spots=room.max_capacity - current_count,
        created_at=room.created_at,
    )


def lock_room_query(room_id: str):
    """SELECT ... FOR UPDATE on one room row"""
    return (
        select(Room)
        .where(Room.id == room_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


def lock_all_rooms_query():
    """SELECT ... FOR UPDATE on every room, taken in id order"""
    return (
        select(Room)
        .order_by(Room.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


def _unique(ids: List[str]) -> List[str]:
    """De-duplicate while keeping request order"""
    return list(dict.fromkeys(i for i in ids if i))


async def release_seat(db: AsyncSession, seat: ProfileRoomMember) -> bool:
    """
    Delete a seat. If it was brought in by a group and no seat of that group
    is left in the room, the group-room linkage goes too.

    Returns True when the linkage was removed. Does not commit.
    """
    room_id, group_id = seat.room_id, seat.group_id
    await db.delete(seat)
    await db.flush()

    if not group_id:
        return False

    remaining = await db.execute(
        select(func.count(ProfileRoomMember.id)).where(
            and_(
                ProfileRoomMember.room_id == room_id,
                ProfileRoomMember.group_id == group_id,
            )
        )
    )
    if remaining.scalar_one() > 0:
        return False

    result = await db.execute(
        delete(GroupRoomAssignment).where(
            and_(
                GroupRoomAssignment.room_id == room_id,
                GroupRoomAssignment.group_id == group_id,
            )
        )
    )
    return result.rowcount > 0


class RoomService:
    """Service for rooms and seat allocation"""

    # ==================== LOCKING HELPERS ====================

    async def _lock_room(self, db: AsyncSession, room_id: str) -> Room:
        """Lock the room row for the rest of the transaction"""
        result = await db.execute(lock_room_query(room_id))
        room = result.scalar_one_or_none()
        if not room:
            raise RoomNotFoundError(room_id)
        return room

    async def _count_seats(self, db: AsyncSession, room_id: str) -> int:
        result = await db.execute(
            select(func.count(ProfileRoomMember.id)).where(ProfileRoomMember.room_id == room_id)
        )
        return result.scalar_one()

    async def _seat_counts(self, db: AsyncSession) -> Dict[str, int]:
        result = await db.execute(
            select(ProfileRoomMember.room_id, func.count(ProfileRoomMember.id))
            .group_by(ProfileRoomMember.room_id)
        )
        return {str(room_id): count for room_id, count in result.all()}

    async def _seated_profile_ids(self, db: AsyncSession, profile_ids: List[str]) -> set:
        if not profile_ids:
            return set()
        result = await db.execute(
            select(ProfileRoomMember.profile_id).where(ProfileRoomMember.profile_id.in_(profile_ids))
        )
        return {str(pid) for pid in result.scalars().all()}

    async def _commit_seats(self, db: AsyncSession, conflict_message: str) -> None:
        """
        Flush and commit new seats. A unique violation means another
        transaction seated one of the profiles first.
        """
        try:
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(conflict_message)

    # ==================== ROOM CRUD ====================

    async def list_rooms(self, db: AsyncSession) -> List[RoomResponse]:
        """All rooms ordered by name, with occupancy"""
        result = await db.execute(select(Room).order_by(Room.name))
        rooms = result.scalars().all()
        counts = await self._seat_counts(db)
        return [build_room_response(room, counts.get(str(room.id), 0)) for room in rooms]

    async def get_room_or_404(self, db: AsyncSession, room_id: str) -> Room:
        result = await db.execute(select(Room).where(Room.id == room_id))
        room = result.scalar_one_or_none()
        if not room:
            raise RoomNotFoundError(room_id)
        return room

    async def get_room_detail(self, db: AsyncSession, room_id: str) -> RoomDetailResponse:
        """Room with its seated members and the groups linked to it"""
        room = await self.get_room_or_404(db, room_id)

        members_result = await db.execute(
            select(Profile, ProfileRoomMember.group_id, Group.name)
            .join(ProfileRoomMember, ProfileRoomMember.profile_id == Profile.id)
            .outerjoin(Group, Group.id == ProfileRoomMember.group_id)
            .where(ProfileRoomMember.room_id == room_id)
            .options(selectinload(Profile.professions))
            .execution_options(populate_existing=True)
            .order_by(Group.name, Profile.first_name, Profile.last_name)
        )
        members = [
            ProfileResponse.from_profile(
                profile,
                room_id=str(room.id),
                room_name=room.name,
                group_id=str(group_id) if group_id else None,
                group_name=group_name,
            )
            for profile, group_id, group_name in members_result.all()
        ]

        # Member count per linked group, limited to seats in this room
        groups_result = await db.execute(
            select(
                Group.id,
                Group.name,
                Group.description,
                func.count(ProfileRoomMember.id),
            )
            .select_from(GroupRoomAssignment)
            .join(Group, Group.id == GroupRoomAssignment.group_id)
            .outerjoin(ProfileGroupMember, ProfileGroupMember.group_id == Group.id)
            .outerjoin(
                ProfileRoomMember,
                and_(
                    ProfileRoomMember.profile_id == ProfileGroupMember.profile_id,
                    ProfileRoomMember.room_id == room_id,
                ),
            )
            .where(GroupRoomAssignment.room_id == room_id)
            .group_by(Group.id, Group.name, Group.description)
            .order_by(Group.name)
        )
        assigned_groups = [
            AssignedGroupResponse(
                id=str(group_id),
                name=name,
                description=description,
                member_count=count,
            )
            for group_id, name, description, count in groups_result.all()
        ]

        base = build_room_response(room, len(members))
        return RoomDetailResponse(
            **base.model_dump(),
            members=members,
            member_count=len(members),
            assigned_groups=assigned_groups,
        )

    async def _ensure_unique_name(self, db: AsyncSession, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(Room.id).where(func.lower(Room.name) == name.lower())
        if exclude_id:
            query = query.where(Room.id != exclude_id)
        existing = await db.execute(query)
        if existing.first():
            raise ConflictError("A room with this name already exists")

    async def create_room(self, db: AsyncSession, room_data: RoomCreate) -> RoomResponse:
        await self._ensure_unique_name(db, room_data.name)

        room = Room(
            name=room_data.name,
            description=room_data.description,
            max_capacity=room_data.max_capacity,
        )
        db.add(room)
        try:
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("A room with this name already exists")

        logger.info(f"Created room {room.id} '{room.name}' (capacity {room.max_capacity})")
        return build_room_response(room, 0)

    async def update_room(self, db: AsyncSession, room_id: str, room_data: RoomUpdate) -> RoomResponse:
        """
        Rename or resize a room. Capacity can never drop below the seats
        already taken, so the room is locked while checking.
        """
        room = await self._lock_room(db, room_id)
        current = await self._count_seats(db, room_id)

        if room_data.name is not None and room_data.name != room.name:
            await self._ensure_unique_name(db, room_data.name, exclude_id=room_id)
            room.name = room_data.name
        if "description" in room_data.model_fields_set:
            room.description = room_data.description
        if room_data.max_capacity is not None:
            if room_data.max_capacity < current:
                raise ConflictError(
                    f"Cannot reduce capacity below current occupancy ({current})",
                    details={"current_count": current, "requested_capacity": room_data.max_capacity},
                )
            room.max_capacity = room_data.max_capacity

        try:
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("A room with this name already exists")

        logger.info(f"Updated room {room_id}")
        return build_room_response(room, current)

    async def delete_room(self, db: AsyncSession, room_id: str) -> str:
        """Delete a room, freeing its seats and dropping its group links"""
        room = await self._lock_room(db, room_id)
        name = room.name

        await db.execute(delete(ProfileRoomMember).where(ProfileRoomMember.room_id == room_id))
        await db.execute(delete(GroupRoomAssignment).where(GroupRoomAssignment.room_id == room_id))
        await db.execute(
            update(Notification).where(Notification.room_id == room_id).values(room_id=None)
        )
        await db.delete(room)
        await db.commit()

        logger.info(f"Deleted room {room_id} '{name}'")
        return name

    # ==================== SEAT ALLOCATION ====================

    async def add_member(self, db: AsyncSession, room_id: str, profile_id: str) -> AddMemberResponse:
        """Seat one profile. Fails when the room is full or the profile already has a seat."""
        room = await self._lock_room(db, room_id)
        current = await self._count_seats(db, room_id)

        if current >= room.max_capacity:
            logger.log_capacity_event(
                str(room.id), "add_member", 0, current, room.max_capacity, rejected=True
            )
            raise CapacityExceededError(
                f"Room {room.name} is full ({current}/{room.max_capacity})",
                available=max(room.max_capacity - current, 0),
                requested=1,
            )

        profile = await db.get(Profile, profile_id)
        if not profile:
            raise ProfileNotFoundError(profile_id)

        existing = await db.execute(
            select(ProfileRoomMember).where(ProfileRoomMember.profile_id == profile_id)
        )
        seat = existing.scalar_one_or_none()
        if seat:
            if str(seat.room_id) == str(room_id):
                raise ConflictError("Profile is already in this room")
            raise ConflictError("Profile is already assigned to a room")

        message = f"{profile.first_name} {profile.last_name} added to {room.name}"
        max_capacity = room.max_capacity
        db.add(ProfileRoomMember(room_id=room_id, profile_id=profile_id))
        await self._commit_seats(db, "Profile is already assigned to a room")

        logger.log_capacity_event(str(room_id), "add_member", 1, current + 1, max_capacity)
        return AddMemberResponse(
            message=message,
            current_count=current + 1,
            max_capacity=max_capacity,
        )

    async def add_members_bulk(self, db: AsyncSession, room_id: str,
                               profile_ids: List[str]) -> BulkAddMembersResponse:
        """
        Seat as many of the given profiles as fit.

        Unknown and already-seated profiles are skipped, then candidates are
        admitted in request order up to the free capacity.
        skipped_count = requested - admitted.
        """
        if not profile_ids:
            raise ValidationError("Profile IDs array is required", field="profileIds")

        requested = len(profile_ids)
        room = await self._lock_room(db, room_id)
        current = await self._count_seats(db, room_id)
        available = room.max_capacity - current

        if available <= 0:
            logger.log_capacity_event(
                str(room.id), "add_members_bulk", 0, current, room.max_capacity, rejected=True
            )
            raise CapacityExceededError(
                f"Room {room.name} is full ({current}/{room.max_capacity})",
                available=0,
                requested=requested,
            )

        candidate_ids = _unique(profile_ids)
        result = await db.execute(select(Profile).where(Profile.id.in_(candidate_ids)))
        found = {str(p.id): p for p in result.scalars().all()}
        seated = await self._seated_profile_ids(db, list(found))

        eligible = [found[pid] for pid in candidate_ids if pid in found and pid not in seated]
        if not eligible:
            raise ValidationError("No available profiles found for assignment", field="profileIds")

        admitted = eligible[:available]
        assigned = [
            SeatedProfile(id=str(p.id), first_name=p.first_name, last_name=p.last_name)
            for p in admitted
        ]
        for profile in admitted:
            db.add(ProfileRoomMember(room_id=room_id, profile_id=str(profile.id)))

        room_name, max_capacity = room.name, room.max_capacity
        await self._commit_seats(db, "One or more profiles were assigned to a room concurrently")

        logger.log_capacity_event(
            str(room_id), "add_members_bulk", len(assigned), current + len(assigned), max_capacity,
            skipped=requested - len(assigned),
        )
        return BulkAddMembersResponse(
            message=f"{len(assigned)} profiles added to {room_name}",
            assigned_profiles=assigned,
            skipped_count=requested - len(assigned),
        )

    async def assign_groups(self, db: AsyncSession, room_id: str,
                            group_ids: List[str]) -> AssignGroupsResponse:
        """
        Seat whole groups. All or nothing: if the groups' combined member count
        exceeds the free capacity, no linkage or seat is written.
        """
        if not group_ids:
            raise ValidationError("Group IDs array is required", field="groupIds")

        group_ids = _unique(group_ids)
        room = await self._lock_room(db, room_id)
        current = await self._count_seats(db, room_id)
        available = room.max_capacity - current

        result = await db.execute(select(Group).where(Group.id.in_(group_ids)))
        groups = {str(g.id): g for g in result.scalars().all()}
        for group_id in group_ids:
            if group_id not in groups:
                raise GroupNotFoundError(group_id)

        linked = await db.execute(
            select(GroupRoomAssignment.group_id).where(
                and_(
                    GroupRoomAssignment.room_id == room_id,
                    GroupRoomAssignment.group_id.in_(group_ids),
                )
            )
        )
        already_linked = [str(gid) for gid in linked.scalars().all()]
        if already_linked:
            names = ", ".join(f'"{groups[gid].name}"' for gid in already_linked)
            raise ConflictError(
                f"Group {names} is already assigned to this room",
                details={"group_ids": already_linked},
            )

        members_result = await db.execute(
            select(ProfileGroupMember.group_id, ProfileGroupMember.profile_id)
            .where(ProfileGroupMember.group_id.in_(group_ids))
        )
        members: List[Tuple[str, str]] = [(str(g), str(p)) for g, p in members_result.all()]
        total_members = len(members)

        if total_members > available:
            logger.log_capacity_event(
                str(room.id), "assign_groups", 0, current, room.max_capacity,
                rejected=True, requested=total_members,
            )
            raise CapacityExceededError(
                f"Not enough capacity. Room has {available} spots available, "
                f"but groups have {total_members} total members.",
                available=available,
                requested=total_members,
            )

        # Members holding a seat anywhere keep it
        seated = await self._seated_profile_ids(db, [pid for _, pid in members])

        for group_id in group_ids:
            db.add(GroupRoomAssignment(group_id=group_id, room_id=room_id))

        added = 0
        for group_id, profile_id in members:
            if profile_id in seated:
                continue
            db.add(ProfileRoomMember(room_id=room_id, profile_id=profile_id, group_id=group_id))
            added += 1

        max_capacity = room.max_capacity
        await self._commit_seats(db, "Group is already assigned or a member was seated concurrently")

        logger.log_capacity_event(
            str(room_id), "assign_groups", added, current + added, max_capacity,
            groups=len(group_ids),
        )
        return AssignGroupsResponse(
            message=f"{len(group_ids)} group(s) assigned to room successfully",
            groups_assigned=len(group_ids),
            members_added=added,
        )

    async def remove_member(self, db: AsyncSession, room_id: str, profile_id: str) -> RemoveMemberResponse:
        """Free one seat, dropping the group link if it was that group's last seat"""
        result = await db.execute(
            select(ProfileRoomMember).where(
                and_(
                    ProfileRoomMember.room_id == room_id,
                    ProfileRoomMember.profile_id == profile_id,
                )
            )
        )
        seat = result.scalar_one_or_none()
        if not seat:
            raise ResourceNotFoundError("Room member", profile_id)

        group_removed = await release_seat(db, seat)
        await db.commit()

        logger.info(
            f"Removed profile {profile_id} from room {room_id}"
            + (" (group link dropped)" if group_removed else "")
        )
        return RemoveMemberResponse(
            message="Profile removed from room successfully",
            group_removed=group_removed,
        )

    async def remove_group(self, db: AsyncSession, room_id: str, group_id: str) -> RemoveGroupResponse:
        """
        Unlink a group from a room. Only seats tagged with that group are
        freed; individually seated profiles stay.
        """
        link_result = await db.execute(
            select(GroupRoomAssignment).where(
                and_(
                    GroupRoomAssignment.room_id == room_id,
                    GroupRoomAssignment.group_id == group_id,
                )
            )
        )
        link = link_result.scalar_one_or_none()
        if not link:
            raise ResourceNotFoundError("Group assignment", group_id)

        await db.delete(link)
        seats = await db.execute(
            delete(ProfileRoomMember).where(
                and_(
                    ProfileRoomMember.room_id == room_id,
                    ProfileRoomMember.group_id == group_id,
                )
            )
        )
        removed = seats.rowcount
        await db.commit()

        logger.info(f"Removed group {group_id} from room {room_id} ({removed} seats freed)")
        return RemoveGroupResponse(
            message="Group removed from room successfully",
            members_removed=removed,
        )

    async def auto_assign(self, db: AsyncSession) -> AutoAssignResponse:
        """
        Distribute unseated profiles over rooms with free capacity.

        Rooms are filled one at a time, most free seats first (ties by name);
        profiles go in first/last name order. Running out of seats is not an
        error: the remainder is reported.
        """
        rooms_result = await db.execute(lock_all_rooms_query())
        rooms = rooms_result.scalars().all()

        profiles_result = await db.execute(
            select(Profile)
            .outerjoin(ProfileRoomMember, ProfileRoomMember.profile_id == Profile.id)
            .where(ProfileRoomMember.id.is_(None))
            .order_by(Profile.first_name, Profile.last_name)
        )
        unseated = profiles_result.scalars().all()

        if not unseated:
            await db.commit()
            return AutoAssignResponse(message="No unassigned profiles found", assigned=[])

        counts = await self._seat_counts(db)
        open_rooms = [
            (room, room.max_capacity - counts.get(str(room.id), 0))
            for room in rooms
            if room.max_capacity - counts.get(str(room.id), 0) > 0
        ]
        if not open_rooms:
            raise CapacityExceededError(
                "No rooms with available capacity found",
                available=0,
                requested=len(unseated),
            )
        open_rooms.sort(key=lambda item: (-item[1], item[0].name))

        assignments: List[AutoAssignment] = []
        index = 0
        for room, spots in open_rooms:
            for _ in range(spots):
                if index >= len(unseated):
                    break
                profile = unseated[index]
                db.add(ProfileRoomMember(room_id=str(room.id), profile_id=str(profile.id)))
                assignments.append(AutoAssignment(
                    profile_id=str(profile.id),
                    profile_name=f"{profile.first_name} {profile.last_name}",
                    room_id=str(room.id),
                    room_name=room.name,
                ))
                index += 1
            if index >= len(unseated):
                break

        remaining = len(unseated) - len(assignments)
        await self._commit_seats(db, "A profile was assigned to a room concurrently")

        logger.info(
            f"Auto-assigned {len(assignments)} profiles, {remaining} left unassigned",
            extra={"event_type": "capacity", "operation": "auto_assign"},
        )
        return AutoAssignResponse(
            message=f"{len(assignments)} profiles assigned successfully",
            assigned=assignments,
            unassigned_remaining=remaining,
        )


# Singleton instance
room_service = RoomService()
