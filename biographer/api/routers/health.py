"""
Health Check Endpoints
"""

from fastapi import APIRouter

from biographer.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ai-biographer-api"}


@router.get("/ready")
async def readiness_check():
    """Readiness check: reports which backends are configured."""
    checks = {
        "supabase": bool(settings.supabase_url and settings.supabase_service_key),
        "openai": bool(settings.openai_api_key),
    }
    return {"status": "ready" if all(checks.values()) else "degraded", "checks": checks}
