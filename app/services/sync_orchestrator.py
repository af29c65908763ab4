"""
Webhook-to-Jamf sync pipeline.

    authenticate -> validate host -> normalize payload
        -> (resolve asset tag via Snipe-IT) -> Jamf lookup -> Jamf update

Each inbound webhook ends in exactly one terminal SyncResult (Updated,
Ignored, TestPing or one of the failure labels) and produces exactly one
audit record. Nothing is retried, and no exception escapes handle(): the
caller always gets a result it can turn into a response.
"""
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import urlsplit

from app.core.config import Settings
from app.core.enums import SyncStatus
from app.core.exceptions import (
    AuthConfigError,
    AuthError,
    AssetNotFoundError,
    BaseServiceError,
    ConfigError,
    DeviceLookupError,
    DeviceUpdateError,
    MalformedPayloadError,
    NotFoundError,
    SnipeITAPIError,
    UnauthorizedError,
)
from app.schemas.sync import AuditRecord, IgnoredEvent, SyncRequest, SyncResult, TestPing
from app.services.audit_logger import AuditSink
from app.services.jamf.client import JamfClient
from app.services.jamf.token_manager import utc_now
from app.services.payload_normalizer import normalize_payload
from app.services.snipeit.client import SnipeITClient

logger = logging.getLogger(__name__)

SECRET_HEADER = "x-webhook-secret"
SECRET_PARAM = "secret"

# First match wins, so subclasses come before their parents
ERROR_STATUSES = (
    (UnauthorizedError, SyncStatus.UNAUTHORIZED),
    (AuthConfigError, SyncStatus.CONFIG_ERROR),
    (ConfigError, SyncStatus.CONFIG_ERROR),
    (MalformedPayloadError, SyncStatus.MALFORMED_PAYLOAD),
    (NotFoundError, SyncStatus.NOT_FOUND),
    (AuthError, SyncStatus.AUTH_ERROR),
    (DeviceLookupError, SyncStatus.LOOKUP_ERROR),
    (SnipeITAPIError, SyncStatus.LOOKUP_ERROR),
    (DeviceUpdateError, SyncStatus.UPDATE_ERROR),
)


def status_for_error(error: BaseException) -> SyncStatus:
    for error_type, status in ERROR_STATUSES:
        if isinstance(error, error_type):
            return status
    return SyncStatus.UNHANDLED_ERROR


def extract_hostname(value: Optional[str]) -> Optional[str]:
    """Hostname of a URL or bare host, lowercased; None if there is none"""
    if not value or not value.strip():
        return None
    value = value.strip()
    if "://" not in value:
        value = f"//{value}"
    try:
        return urlsplit(value).hostname
    except ValueError:
        return None


@dataclass
class InboundWebhook:
    """Transport-neutral view of one inbound request"""
    body: Union[bytes, str]
    headers: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Header names are case-insensitive
        self.headers = {key.lower(): value for key, value in dict(self.headers).items()}
        self.query_params = dict(self.query_params)

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


class AssetSyncOrchestrator:
    """
    Runs one webhook through the pipeline and records the outcome.

    Collaborators are injected; the FastAPI app builds one instance per
    process (see app.dependencies) so the Jamf token cache is shared by all
    requests.
    """

    def __init__(
        self,
        settings: Settings,
        jamf_client: JamfClient,
        audit_sink: AuditSink,
        snipeit_client: Optional[SnipeITClient] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings
        self.jamf_client = jamf_client
        self.snipeit_client = snipeit_client
        self.audit_sink = audit_sink
        self.clock = clock

    async def handle(self, webhook: InboundWebhook) -> SyncResult:
        """Authenticate, then sync. Always returns a result."""
        context: Dict[str, Any] = {}
        try:
            self.authenticate(webhook)
            self.validate_host(webhook)
            result = await self._sync(webhook.body, context)
        except Exception as e:
            result = self._failure(e, context)

        await self._finish(result)
        return result

    async def process_payload(self, body: Union[bytes, str, dict]) -> SyncResult:
        """Sync a payload that has already been trusted (CLI replays)"""
        context: Dict[str, Any] = {}
        try:
            result = await self._sync(body, context)
        except Exception as e:
            result = self._failure(e, context)

        await self._finish(result)
        return result

    def authenticate(self, webhook: InboundWebhook):
        """
        Accept the shared secret from either the X-Webhook-Secret header or
        the ``secret`` query parameter. Some proxies drop custom headers, so
        both are trusted equally and either one is enough.
        """
        expected = self.settings.WEBHOOK_SECRET
        if not expected:
            raise ConfigError("WEBHOOK_SECRET is not configured")

        presented = (webhook.header(SECRET_HEADER), webhook.query_params.get(SECRET_PARAM))
        for candidate in presented:
            if candidate and secrets.compare_digest(candidate.encode("utf8"), expected.encode("utf8")):
                return

        raise UnauthorizedError("Missing or invalid webhook secret")

    def validate_host(self, webhook: InboundWebhook):
        """
        Compare the Referer or Origin hostname with WEBHOOK_EXPECTED_HOST.
        Skipped when no expected host is configured.
        """
        configured = self.settings.WEBHOOK_EXPECTED_HOST
        if not configured:
            return

        expected = extract_hostname(configured)
        if not expected:
            raise ConfigError(f"WEBHOOK_EXPECTED_HOST is not a valid host: {configured!r}")

        for header in ("referer", "origin"):
            if extract_hostname(webhook.header(header)) == expected:
                return

        raise UnauthorizedError(f"Request did not come from {expected}")

    async def resolve_serial(self, request: SyncRequest) -> str:
        if not request.needs_resolution:
            return request.asset_identifier

        if self.snipeit_client is None:
            raise ConfigError("Snipe-IT is not configured; cannot resolve asset tags")

        serial = await self.snipeit_client.resolve_serial(request.asset_identifier)
        if not serial:
            raise AssetNotFoundError(f"No Snipe-IT asset with tag {request.asset_identifier}")
        return serial

    async def _sync(self, body, context: Dict[str, Any]) -> SyncResult:
        normalized = normalize_payload(
            body,
            test_ping_channel=self.settings.TEST_PING_CHANNEL,
            test_ping_marker=self.settings.TEST_PING_MARKER,
        )
        context["payload_kind"] = normalized.payload_kind

        if isinstance(normalized, TestPing):
            return SyncResult(
                status=SyncStatus.TEST_PING,
                message="Test notification received",
                **context,
            )

        if isinstance(normalized, IgnoredEvent):
            return SyncResult(
                status=SyncStatus.IGNORED,
                message=f"Event {normalized.event_name!r} is not a check-in or check-out",
                event_name=normalized.event_name,
                **context,
            )

        request = normalized
        context["request"] = request

        serial = await self.resolve_serial(request)
        context["serial_number"] = serial

        device_id = await self.jamf_client.resolve_by_serial(serial)
        context["device_id"] = device_id

        status_code = await self.jamf_client.apply_user_and_location(
            device_id,
            username=request.username,
            real_name=request.real_name,
            location=request.location_name,
        )

        if request.username:
            change = f"assigned to {request.username}"
        else:
            change = "ownership cleared"
        return SyncResult(
            status=SyncStatus.UPDATED,
            message=f"{request.event_kind.value}: {serial} {change}, location {request.location_name or '(none)'}",
            outcome=str(status_code),
            **context,
        )

    def _failure(self, error: Exception, context: Dict[str, Any]) -> SyncResult:
        status = status_for_error(error)
        if status == SyncStatus.UNHANDLED_ERROR:
            logger.exception("Unhandled error while processing webhook")
            message = f"Unexpected error: {error}"
        else:
            message = str(error)

        outcome = ""
        if isinstance(error, DeviceUpdateError) and error.status_code is not None:
            outcome = str(error.status_code)

        return SyncResult(status=status, message=message, outcome=outcome, **context)

    async def _finish(self, result: SyncResult):
        if result.status.is_success:
            logger.info(result.response_text)
        elif result.status == SyncStatus.UNAUTHORIZED:
            logger.warning(result.response_text)
        else:
            logger.error(result.response_text)

        record = AuditRecord.from_result(result, timestamp=self.clock())
        try:
            await self.audit_sink.write(record)
        except Exception as e:
            logger.error(f"Audit sink failed: {str(e)}")
