"""
In-process stand-ins for the Jamf Pro and Snipe-IT HTTP APIs.

Each fake is callable as an httpx.MockTransport handler and keeps every
request it receives so tests can assert on call counts and bodies.
"""
import json
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from urllib.parse import urlparse

import httpx


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeJamf:
    """Jamf Pro: token endpoints, computers-inventory lookup and patch"""

    def __init__(
        self,
        clock: FakeClock,
        devices: Optional[Dict[str, str]] = None,
        token_lifetime: timedelta = timedelta(minutes=20),
    ):
        self.clock = clock
        self.devices = devices if devices is not None else {"C02ABC": "42"}
        self.token_lifetime = token_lifetime
        self.token_status = 200
        self.lookup_status = 200
        self.update_status = 204
        self.expires_in_override = None  # sent as expires_in in API client mode when set
        self.network_error: Optional[str] = None  # "token", "lookup" or "update"
        self.requests: List[httpx.Request] = []
        self._issued = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path in ("/api/v1/auth/token", "/api/oauth/token"):
            return self._token(request, path)
        if request.method == "GET" and path == "/api/v1/computers-inventory":
            return self._lookup(request)
        if request.method == "PATCH" and path.startswith("/api/v1/computers-inventory/"):
            return self._update(request)
        return httpx.Response(404, text="no route")

    def _token(self, request, path):
        if self.network_error == "token":
            raise httpx.ConnectError("connection refused", request=request)
        if self.token_status != 200:
            return httpx.Response(self.token_status, text="Unauthorized")

        self._issued += 1
        token = f"token-{self._issued}"
        if path == "/api/oauth/token":
            return httpx.Response(200, json={
                "access_token": token,
                "expires_in": (
                    self.expires_in_override if self.expires_in_override is not None
                    else int(self.token_lifetime.total_seconds())
                ),
                "token_type": "Bearer",
            })
        expires = (self.clock() + self.token_lifetime).strftime("%Y-%m-%dT%H:%M:%S.000Z")
        return httpx.Response(200, json={"token": token, "expires": expires})

    def _lookup(self, request):
        if self.network_error == "lookup":
            raise httpx.ConnectError("connection refused", request=request)
        if self.lookup_status != 200:
            return httpx.Response(self.lookup_status, text="Server Error")

        match = re.fullmatch(r'hardware\.serialNumber=="((?:[^"\\]|\\.)*)"', request.url.params.get("filter", ""))
        serial = re.sub(r"\\(.)", r"\1", match.group(1)) if match else ""
        device_id = self.devices.get(serial)
        results = [{"id": device_id, "userAndLocation": {"username": "previous"}}] if device_id else []
        return httpx.Response(200, json={"totalCount": len(results), "results": results})

    def _update(self, request):
        if self.network_error == "update":
            raise httpx.ConnectError("connection refused", request=request)
        if self.update_status == 204:
            return httpx.Response(204)
        if self.update_status == 200:
            return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})
        return httpx.Response(self.update_status, text="Invalid field")

    def calls(self, method: str, path_prefix: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.startswith(path_prefix)
        ]

    @property
    def token_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def lookup_requests(self) -> List[httpx.Request]:
        return self.calls("GET", "/api/v1/computers-inventory")

    @property
    def update_requests(self) -> List[httpx.Request]:
        return self.calls("PATCH", "/api/v1/computers-inventory/")

    def update_bodies(self) -> List[dict]:
        return [json.loads(r.content) for r in self.update_requests]


class FakeSnipeIT:
    """Snipe-IT: /api/v1/hardware search"""

    def __init__(self, rows: Optional[List[dict]] = None):
        self.rows = rows if rows is not None else [
            {"asset_tag": "181630", "serial": "WRONG-PREFIX"},
            {"asset_tag": "18163", "serial": "C02ABC"},
        ]
        self.status = 200
        self.requests: List[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method != "GET" or request.url.path != "/api/v1/hardware":
            return httpx.Response(404, text="no route")
        if self.status != 200:
            return httpx.Response(self.status, text="Forbidden")

        search = request.url.params.get("search", "")
        rows = [row for row in self.rows if search in str(row.get("asset_tag", ""))]
        return httpx.Response(200, json={"total": len(rows), "rows": rows})
