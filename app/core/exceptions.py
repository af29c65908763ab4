from typing import Optional


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ConfigError(BaseServiceError):
    """Raised when required configuration is missing or malformed."""
    pass

class AuthError(BaseServiceError):
    """Base exception for Jamf credential errors."""
    pass

class AuthConfigError(AuthError):
    """Raised when Jamf credentials are not configured."""
    pass

class AuthFetchError(AuthError):
    """Raised when the Jamf token endpoint does not issue a token."""
    pass

class UnauthorizedError(BaseServiceError):
    """Raised when an inbound webhook fails the secret or host check."""
    pass

class MalformedPayloadError(BaseServiceError):
    """Raised when a webhook body cannot be read as a supported payload."""
    pass

class NotFoundError(BaseServiceError):
    """Base exception for missing devices or assets."""
    pass

class DeviceNotFoundError(NotFoundError):
    """Raised when Jamf has no computer with the given serial number."""
    pass

class AssetNotFoundError(NotFoundError):
    """Raised when an asset tag cannot be resolved to a serial number."""
    pass

class JamfAPIError(BaseServiceError):
    """Base exception for Jamf API call failures."""
    pass

class DeviceLookupError(JamfAPIError):
    """Raised when the Jamf inventory lookup fails."""
    pass

class DeviceUpdateError(JamfAPIError):
    """Raised when the Jamf inventory update is rejected."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

class SnipeITAPIError(BaseServiceError):
    """Raised when Snipe-IT API calls fail."""
    pass
