"""
Database Seed Data Module

Reference catalogs (professions, subjects), a handful of rooms and an
optional default admin. Every step skips rows that already exist, so it is
safe to run on each startup.
Run with: python -m app.db.seed_data
"""
import asyncio
from typing import Dict, List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal, init_db
from app.core.logging_config import logger
from app.core.security import get_password_hash
from app.models import (
    User,
    UserRole,
    Profession,
    Subject,
    Room,
    Notification,
    ProfileRoomMember,
    GroupRoomAssignment,
    ProfileGroupMember,
    GroupSubject,
    Group,
    ProfileProfessionMember,
    Profile,
)


# ==================== Sample Data Constants ====================

PROFESSIONS = [
    "Designer",
    "Developer",
    "Data Analyst",
    "Engineer",
    "Manager",
    "Marketer",
    "Researcher",
    "Student",
    "Teacher",
    "Writer",
]

SUBJECTS = [
    {"name": "Mathematics", "description": "Algebra, calculus and statistics"},
    {"name": "Physics", "description": "Mechanics, electricity and optics"},
    {"name": "Computer Science", "description": "Programming and algorithms"},
    {"name": "Literature", "description": "Reading and writing workshops"},
    {"name": "History", "description": "World and regional history"},
    {"name": "Art", "description": "Drawing, painting and design"},
]

ROOMS = [
    {"name": "Room A", "description": "Ground floor seminar room", "max_capacity": 10},
    {"name": "Room B", "description": "First floor lab", "max_capacity": 8},
    {"name": "Room C", "description": "Small meeting room", "max_capacity": 5},
]


async def _existing_names(db: AsyncSession, column) -> set:
    result = await db.execute(select(column))
    return {name.lower() for name in result.scalars().all()}


async def seed_professions(db: AsyncSession) -> int:
    """Create the profession catalog"""
    existing = await _existing_names(db, Profession.name)
    created = 0
    for name in PROFESSIONS:
        if name.lower() not in existing:
            db.add(Profession(name=name))
            created += 1
    return created


async def seed_subjects(db: AsyncSession) -> int:
    """Create the subject catalog"""
    existing = await _existing_names(db, Subject.name)
    created = 0
    for data in SUBJECTS:
        if data["name"].lower() not in existing:
            db.add(Subject(**data))
            created += 1
    return created


async def seed_rooms(db: AsyncSession) -> int:
    """Create sample rooms, only into an empty rooms table"""
    result = await db.execute(select(Room.id).limit(1))
    if result.first():
        return 0
    for data in ROOMS:
        db.add(Room(**data))
    return len(ROOMS)


async def seed_admin(db: AsyncSession) -> bool:
    """Create the default admin when both email and password are configured"""
    email = (settings.DEFAULT_ADMIN_EMAIL or "").lower()
    if not email or not settings.DEFAULT_ADMIN_PASSWORD:
        return False

    result = await db.execute(select(User.id).where(User.email == email))
    if result.first():
        return False

    db.add(User(
        email=email,
        hashed_password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        role=UserRole.ADMIN,
        is_active=True,
    ))
    return True


async def seed_database() -> Dict[str, int]:
    """Seed reference data; returns how many rows of each kind were created"""
    async with AsyncSessionLocal() as db:
        try:
            counts = {
                "professions": await seed_professions(db),
                "subjects": await seed_subjects(db),
                "rooms": await seed_rooms(db),
                "admins": int(await seed_admin(db)),
            }
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error("Database seeding failed", exc_info=True)
            raise

    logger.info(f"Database seeding completed: {counts}")
    return counts


async def seed_all():
    """Create tables, then seed"""
    await init_db()
    return await seed_database()


async def clear_all():
    """Clear all data from database"""
    # Children before parents
    tables: List = [
        Notification,
        ProfileRoomMember,
        GroupRoomAssignment,
        ProfileGroupMember,
        GroupSubject,
        ProfileProfessionMember,
        User,
        Room,
        Group,
        Profile,
        Subject,
        Profession,
    ]
    async with AsyncSessionLocal() as db:
        for model in tables:
            await db.execute(delete(model))
        await db.commit()
    logger.info("All data cleared")


def main():
    """Seed the database, or wipe it with `clear`"""
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())


if __name__ == "__main__":
    main()
