"""API v1 routes."""

from fastapi import APIRouter

from runners_api.api.v1 import admin, auth, cases, devices, health, monitoring, runners, topics, uploads, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(runners.router, prefix="/runners", tags=["runners"])
router.include_router(cases.router, prefix="/cases", tags=["cases"])
router.include_router(devices.router, prefix="/devices", tags=["devices"])
router.include_router(topics.router, prefix="/topics", tags=["topics"])
router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(monitoring.router, prefix="/monitoring", tags=["monitoring"])
