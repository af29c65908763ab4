from fastapi import APIRouter, Depends

from app.dependencies import get_jamf_auth_manager
from app.services.jamf.auth import JamfAuthManager

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/jamf/token")
async def jamf_token_status(auth_manager: JamfAuthManager = Depends(get_jamf_auth_manager)):
    """Cached token state. The token itself is never returned."""
    expires_at = auth_manager.token_cache.expires_at
    return {
        "cached": auth_manager.token_cache.get_valid_token() is not None,
        "expires_at": expires_at.isoformat() if expires_at else None,
        "mode": "api_client" if auth_manager.uses_api_client else "basic",
    }


@router.post("/jamf/token/reset")
async def reset_jamf_token(auth_manager: JamfAuthManager = Depends(get_jamf_auth_manager)):
    """Drop the cached Jamf token; the next webhook fetches a fresh one"""
    auth_manager.reset_token()
    return {"status": "reset"}
