from functools import lru_cache

from app.core.config import get_settings
from app.services.audit_logger import AuditSink, DatabaseAuditSink, LoggingAuditSink
from app.services.jamf.auth import JamfAuthManager
from app.services.jamf.client import JamfClient
from app.services.snipeit.client import SnipeITClient
from app.services.sync_orchestrator import AssetSyncOrchestrator


@lru_cache()
def get_jamf_auth_manager() -> JamfAuthManager:
    """Process-wide auth manager, so the token cache outlives single requests"""
    return JamfAuthManager(settings=get_settings())


def get_audit_sink() -> AuditSink:
    settings = get_settings()
    if settings.DATABASE_URL:
        from app.database import get_sessionmaker
        return DatabaseAuditSink(get_sessionmaker())
    return LoggingAuditSink()


@lru_cache()
def get_orchestrator() -> AssetSyncOrchestrator:
    settings = get_settings()
    snipeit_client = None
    if settings.SNIPEIT_URL:
        snipeit_client = SnipeITClient(settings=settings)

    return AssetSyncOrchestrator(
        settings=settings,
        jamf_client=JamfClient(get_jamf_auth_manager(), settings=settings),
        audit_sink=get_audit_sink(),
        snipeit_client=snipeit_client,
    )
