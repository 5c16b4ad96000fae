# API endpoints
from . import health, auth, profiles, catalog, groups, rooms, notifications

__all__ = ["health", "auth", "profiles", "catalog", "groups", "rooms", "notifications"]
