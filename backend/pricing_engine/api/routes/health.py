"""Health check endpoint."""

from fastapi import APIRouter

from ...api.dependencies import ProfileLoaderDep
from ...config import settings


router = APIRouter(prefix="/api/v1", tags=["Health"])


@router.get("/health")
async def health_check(loader: ProfileLoaderDep) -> dict:
    """
    Health check endpoint.

    Returns:
        Health status and available pricing profiles
    """
    return {
        "status": "healthy",
        "service": "Treatment pricing engine",
        "version": "0.1.0",
        "default_profile": settings.default_profile,
        "profiles": loader.list_profiles(),
    }
