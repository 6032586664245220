"""HTTP routes, mounted at API_PREFIX (the root by default)."""

from fastapi import APIRouter

from driveeasy.api import admin, auth, bookings, health, instructors, notifications, stats

router = APIRouter()
router.include_router(health.router, tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(instructors.router, tags=["instructors"])
router.include_router(bookings.router, tags=["bookings"])
router.include_router(notifications.router, tags=["notifications"])
router.include_router(admin.router, tags=["admin"])
router.include_router(stats.router, tags=["stats"])
