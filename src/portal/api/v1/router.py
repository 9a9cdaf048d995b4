from fastapi import APIRouter

from src.portal.api.v1 import admin, auth, notifications, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
api_router.include_router(notifications.router)
