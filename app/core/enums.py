"""
Shared enums and constants used across the application.
"""

from enum import Enum


class EventKind(str, Enum):
    CHECKED_IN = "CheckedIn"
    CHECKED_OUT = "CheckedOut"


class IdentifierType(str, Enum):
    """What the asset identifier on a sync request refers to"""
    SERIAL = "serial"
    ASSET_TAG = "asset_tag"


class PayloadKind(str, Enum):
    STRUCTURED = "structured"
    CHAT = "chat"
    TEST_PING = "test_ping"


class SyncStatus(str, Enum):
    """
    Status labels written to the audit log, one per inbound request.

    Missing Jamf credentials (AuthConfigError) are recorded as CONFIG_ERROR
    with the other configuration faults; AUTH_ERROR is reserved for a token
    endpoint that refuses or fails.
    """
    UPDATED = "Updated"
    IGNORED = "Ignored"
    TEST_PING = "TestPing"
    UNAUTHORIZED = "Unauthorized"
    CONFIG_ERROR = "ConfigError"
    MALFORMED_PAYLOAD = "MalformedPayload"
    NOT_FOUND = "NotFound"
    AUTH_ERROR = "AuthError"
    LOOKUP_ERROR = "LookupError"
    UPDATE_ERROR = "UpdateError"
    UNHANDLED_ERROR = "UnhandledError"

    @property
    def is_success(self) -> bool:
        return self in (SyncStatus.UPDATED, SyncStatus.IGNORED, SyncStatus.TEST_PING)

    @property
    def http_status(self) -> int:
        """Status code used when responses reflect the outcome"""
        return _STRICT_HTTP_STATUS[self]


_STRICT_HTTP_STATUS = {
    SyncStatus.UPDATED: 200,
    SyncStatus.IGNORED: 200,
    SyncStatus.TEST_PING: 200,
    SyncStatus.UNAUTHORIZED: 401,
    SyncStatus.CONFIG_ERROR: 500,
    SyncStatus.MALFORMED_PAYLOAD: 400,
    SyncStatus.NOT_FOUND: 404,
    SyncStatus.AUTH_ERROR: 502,
    SyncStatus.LOOKUP_ERROR: 502,
    SyncStatus.UPDATE_ERROR: 502,
    SyncStatus.UNHANDLED_ERROR: 500,
}


class ResponseMode(str, Enum):
    STRICT = "strict"        # HTTP status reflects the outcome
    ALWAYS_OK = "always_ok"  # always 200, outcome only in the body
