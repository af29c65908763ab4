from app.models.sync_audit import SyncAuditLog

__all__ = ["SyncAuditLog"]
