"""
Database module for RoomRoster

Contains seed data and database utilities.
"""
from app.db.seed_data import seed_all, seed_database, clear_all

__all__ = ["seed_all", "seed_database", "clear_all"]
