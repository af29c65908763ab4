# app/services/audit_logger.py
import logging
from typing import Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sync_audit import SyncAuditLog
from app.schemas.sync import AuditRecord

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    """Write-only destination for audit records"""

    async def write(self, record: AuditRecord) -> None:
        ...


class LoggingAuditSink:
    """
    Emits each audit record as one log line.

    Used when no audit database is configured.
    """

    def __init__(self, audit_logger: logging.Logger = None):
        self.audit_logger = audit_logger or logging.getLogger("app.audit")

    async def write(self, record: AuditRecord) -> None:
        self.audit_logger.info(" | ".join(record.as_row()))


class DatabaseAuditSink:
    """
    Appends audit records to the sync_audit_log table.

    Each record is committed in its own session so that a failure never
    spills into another request. Write errors are logged, not raised:
    auditing must not change the response sent back to Snipe-IT.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory

    async def write(self, record: AuditRecord) -> None:
        try:
            async with self.session_factory() as session:
                session.add(SyncAuditLog(
                    created_at=record.timestamp,
                    status=record.status.value,
                    event_kind=record.event_kind,
                    payload_kind=record.payload_kind,
                    asset_identifier=record.asset_identifier,
                    serial_number=record.serial_number,
                    device_id=record.device_id,
                    username=record.username,
                    outcome=record.outcome,
                    detail=record.detail,
                ))
                await session.commit()

            logger.debug(
                f"Audit logged: {record.status.value} {record.asset_identifier or '-'}"
            )
        except Exception as e:
            logger.error(f"Error writing audit record: {str(e)}")
            logger.error(f"Unwritten audit record: {' | '.join(record.as_row())}")
