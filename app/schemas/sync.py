"""
Canonical records that flow through the sync pipeline.
"""
from datetime import datetime
from typing import Optional, Tuple, Union

from pydantic import model_validator

from app.core.enums import EventKind, IdentifierType, PayloadKind, ResponseMode, SyncStatus
from app.schemas.base import BaseSchema


class SyncRequest(BaseSchema):
    """
    One ownership/location change to push to Jamf.

    Check-in clears ownership: username and real_name are always empty for
    CHECKED_IN while location_name is kept.
    """
    event_kind: EventKind
    asset_identifier: str
    identifier_type: IdentifierType = IdentifierType.SERIAL
    username: str = ""
    real_name: str = ""
    location_name: str = ""
    payload_kind: PayloadKind = PayloadKind.STRUCTURED

    @model_validator(mode="after")
    def _clear_owner_on_checkin(self):
        if self.event_kind == EventKind.CHECKED_IN:
            self.username = ""
            self.real_name = ""
        return self

    @property
    def needs_resolution(self) -> bool:
        return self.identifier_type == IdentifierType.ASSET_TAG


class IgnoredEvent(BaseSchema):
    """A well-formed payload that is not a check-in or check-out"""
    event_name: str
    payload_kind: PayloadKind


class TestPing(BaseSchema):
    """Snipe-IT's built-in "Test Integration" message"""
    __test__ = False  # not a pytest class

    channel: str
    payload_kind: PayloadKind = PayloadKind.TEST_PING


NormalizedPayload = Union[SyncRequest, IgnoredEvent, TestPing]


class SyncResult(BaseSchema):
    """Terminal state of one inbound webhook"""
    status: SyncStatus
    message: str
    payload_kind: Optional[PayloadKind] = None
    request: Optional[SyncRequest] = None
    event_name: str = ""
    serial_number: str = ""
    device_id: str = ""
    outcome: str = ""

    @property
    def response_text(self) -> str:
        return f"{self.status.value}: {self.message}"

    def http_status(self, mode: ResponseMode) -> int:
        if mode == ResponseMode.ALWAYS_OK:
            return 200
        return self.status.http_status


class AuditRecord(BaseSchema):
    """One append-only audit row per inbound webhook"""
    timestamp: datetime
    status: SyncStatus
    event_kind: str = ""
    payload_kind: str = ""
    asset_identifier: str = ""
    serial_number: str = ""
    device_id: str = ""
    username: str = ""
    outcome: str = ""
    detail: str = ""

    @classmethod
    def from_result(cls, result: SyncResult, timestamp: datetime) -> "AuditRecord":
        request = result.request
        serial_number = result.serial_number
        if not serial_number and request and not request.needs_resolution:
            serial_number = request.asset_identifier

        return cls(
            timestamp=timestamp,
            status=result.status,
            event_kind=request.event_kind.value if request else result.event_name,
            payload_kind=result.payload_kind.value if result.payload_kind else "",
            asset_identifier=request.asset_identifier if request else "",
            serial_number=serial_number,
            device_id=result.device_id,
            username=request.username if request else "",
            outcome=result.outcome,
            detail=result.message,
        )

    def as_row(self) -> Tuple[str, ...]:
        """Ordered row as written to tabular sinks"""
        return (
            self.timestamp.isoformat(),
            self.status.value,
            self.event_kind,
            self.payload_kind,
            self.asset_identifier,
            self.serial_number,
            self.device_id,
            self.username,
            self.outcome,
            self.detail,
        )
