"""API routes package."""

from fastapi import APIRouter

from app.api.routes import (
    auth,
    health,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(users.router, tags=["User Profile"])
