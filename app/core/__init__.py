"""
Core module exports.
"""
from .enums import (
    EventKind,
    IdentifierType,
    PayloadKind,
    SyncStatus,
    ResponseMode
)

from .exceptions import (
    BaseServiceError,
    ConfigError,
    AuthError,
    AuthConfigError,
    AuthFetchError,
    UnauthorizedError,
    MalformedPayloadError,
    NotFoundError,
    DeviceNotFoundError,
    AssetNotFoundError,
    JamfAPIError,
    DeviceLookupError,
    DeviceUpdateError,
    SnipeITAPIError
)
