from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "Snipe-IT to Jamf Sync",
        "environment": settings.ENVIRONMENT,
        "response_mode": settings.WEBHOOK_RESPONSE_MODE.value,
        "configured": {
            "webhook_secret": bool(settings.WEBHOOK_SECRET),
            "expected_host": bool(settings.WEBHOOK_EXPECTED_HOST),
            "jamf": bool(settings.JAMF_URL),
            "snipeit": bool(settings.SNIPEIT_URL and settings.SNIPEIT_API_TOKEN),
            "audit_database": bool(settings.DATABASE_URL),
        },
    }
