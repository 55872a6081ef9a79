"""Health check endpoints."""

from fastapi import APIRouter

from app.core.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check if the API is running."""
    settings = get_settings()
    return {"status": "healthy", "app": settings.app_name, "version": "1.0.0"}
