# app/models/sync_audit.py
from sqlalchemy import Column, Integer, String, DateTime, Text
from app.database import Base

class SyncAuditLog(Base):
    """
    Append-only record of every inbound webhook and what happened to it.

    One row per request, whatever the outcome. Rows are never updated.
    """
    __tablename__ = "sync_audit_log"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String(32), nullable=False, index=True)  # SyncStatus label
    event_kind = Column(String(64), nullable=False, default="")
    payload_kind = Column(String(16), nullable=False, default="")
    asset_identifier = Column(String(100), nullable=False, default="", index=True)
    serial_number = Column(String(100), nullable=False, default="", index=True)
    device_id = Column(String(32), nullable=False, default="")
    username = Column(String(255), nullable=False, default="")
    outcome = Column(String(16), nullable=False, default="")  # Jamf status code
    detail = Column(Text, nullable=False, default="")

    def __repr__(self):
        return f"<SyncAuditLog {self.status} {self.asset_identifier}>"
