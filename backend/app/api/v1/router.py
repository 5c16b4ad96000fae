from fastapi import APIRouter
from app.api.v1.endpoints import auth, profiles, catalog, groups, rooms, notifications, health

api_router = APIRouter()

# Deep health checks (/health/live, /health/ready) plus the plain /health probe
api_router.include_router(health.router, tags=["Health"])

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
api_router.include_router(catalog.router, tags=["Catalog"])
api_router.include_router(groups.router, prefix="/groups", tags=["Groups"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["Rooms"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
