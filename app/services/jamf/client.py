import json
import logging
from typing import Dict, Optional

import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import DeviceLookupError, DeviceNotFoundError, DeviceUpdateError
from .auth import JamfAuthManager

logger = logging.getLogger(__name__)


class JamfClient:
    """
    Jamf Pro inventory client.

    Two operations:
    - resolve_by_serial: filtered computers-inventory lookup returning the
      Jamf computer id.
    - apply_user_and_location: partial update of the userAndLocation section.
      Only username, realName, building and department are sent; every other
      field on the computer record is left untouched.

    A 401 from either call is reported as a failure. The cached token is not
    refreshed and the call is not retried.
    """

    INVENTORY_PATH = "/api/v1/computers-inventory"

    def __init__(
        self,
        auth_manager: JamfAuthManager,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.auth_manager = auth_manager
        self.settings = settings or get_settings()
        self.base_url = self.settings.JAMF_URL.rstrip("/")
        self.timeout = self.settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def _get_headers(self) -> Dict[str, str]:
        token = await self.auth_manager.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        headers = await self._get_headers()

        logger.debug(f"Making {method} request to {url}")
        if kwargs.get("params"):
            logger.debug(f"Params: {kwargs['params']}")
        if kwargs.get("json"):
            logger.debug(f"Data: {json.dumps(kwargs['json'])[:500]}")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.request(method, url, headers=headers, **kwargs)

    async def resolve_by_serial(self, serial: str) -> str:
        """
        Find the Jamf computer id for a serial number

        Raises:
            DeviceNotFoundError: no computer has this serial
            DeviceLookupError: the lookup request failed
        """
        params = {
            "filter": f"hardware.serialNumber=={quote_filter_value(serial)}",
            "section": "USER_AND_LOCATION",
        }
        try:
            response = await self._request("GET", self.INVENTORY_PATH, params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error looking up serial {serial}: {str(e)}")
            raise DeviceLookupError(f"Network error looking up serial {serial}: {str(e)}")

        if response.status_code != 200:
            logger.error(f"Jamf lookup failed ({response.status_code}): {response.text}")
            raise DeviceLookupError(
                f"Jamf lookup for serial {serial} returned {response.status_code}: {response.text}"
            )

        try:
            results = response.json().get("results") or []
        except (ValueError, AttributeError):
            raise DeviceLookupError(f"Jamf lookup for serial {serial} returned an unreadable body")

        if not results:
            raise DeviceNotFoundError(f"No Jamf computer with serial {serial}")

        device_id = results[0].get("id")
        if device_id in (None, ""):
            raise DeviceLookupError(f"Jamf lookup for serial {serial} returned a result without an id")

        if len(results) > 1:
            logger.warning(f"{len(results)} Jamf computers share serial {serial}, using id {device_id}")

        return str(device_id)

    async def apply_user_and_location(
        self,
        device_id: str,
        username: str,
        real_name: str,
        location: str,
    ) -> int:
        """
        Merge-patch the userAndLocation section of a computer

        Returns:
            int: Jamf response status (200 or 204)

        Raises:
            DeviceUpdateError: any other status, or the request failed
        """
        payload = build_user_and_location_patch(username, real_name, location)
        try:
            response = await self._request("PATCH", f"{self.INVENTORY_PATH}/{device_id}", json=payload)
        except httpx.RequestError as e:
            logger.error(f"Network error updating computer {device_id}: {str(e)}")
            raise DeviceUpdateError(f"Network error updating computer {device_id}: {str(e)}")

        if response.status_code not in (200, 204):
            logger.error(f"Jamf update failed ({response.status_code}): {response.text}")
            raise DeviceUpdateError(
                f"Jamf update of computer {device_id} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info(f"Updated userAndLocation on Jamf computer {device_id} ({response.status_code})")
        return response.status_code


def build_user_and_location_patch(username: str, real_name: str, location: str) -> Dict:
    """Building and department both mirror the Snipe-IT location name"""
    return {
        "userAndLocation": {
            "username": username,
            "realName": real_name,
            "building": location,
            "department": location,
        }
    }


def quote_filter_value(value: str) -> str:
    """Double-quote a value for an RSQL filter so , ; and operators stay literal"""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
