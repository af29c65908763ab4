# tests/unit/services/jamf/test_jamf_auth.py
import asyncio
import base64
from datetime import timedelta

import httpx
import pytest

from app.core.exceptions import AuthConfigError, AuthFetchError
from app.services.jamf.auth import JamfAuthManager
from app.services.jamf.token_manager import TokenCache

"""
1. Configuration Tests
"""

@pytest.mark.asyncio
async def test_missing_jamf_url_raises_config_error(settings, clock, fake_jamf):
    settings.JAMF_URL = ""
    auth_manager = JamfAuthManager(settings, TokenCache(clock=clock), transport=fake_jamf.transport)

    with pytest.raises(AuthConfigError):
        await auth_manager.get_token()

    assert fake_jamf.requests == []


@pytest.mark.asyncio
async def test_missing_credentials_raise_config_error(settings, clock, fake_jamf):
    settings.JAMF_PASSWORD = ""
    auth_manager = JamfAuthManager(settings, TokenCache(clock=clock), transport=fake_jamf.transport)

    with pytest.raises(AuthConfigError) as exc_info:
        await auth_manager.get_token()

    assert "JAMF_USERNAME" in str(exc_info.value)
    assert fake_jamf.requests == []


"""
2. Token Caching Tests
"""

@pytest.mark.asyncio
async def test_get_token_uses_basic_credentials(auth_manager, fake_jamf):
    token = await auth_manager.get_token()

    assert token == "token-1"
    assert len(fake_jamf.token_requests) == 1

    request = fake_jamf.token_requests[0]
    assert request.url.path == "/api/v1/auth/token"
    expected = base64.b64encode(b"api-user:api-pass").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


@pytest.mark.asyncio
async def test_second_call_within_window_makes_no_request(auth_manager, fake_jamf, clock):
    first = await auth_manager.get_token()
    clock.advance(minutes=10)
    second = await auth_manager.get_token()

    assert first == second
    assert len(fake_jamf.token_requests) == 1


@pytest.mark.asyncio
async def test_call_after_expiry_fetches_exactly_once(auth_manager, fake_jamf, clock):
    await auth_manager.get_token()

    # 20 minute token, 5 minute margin
    clock.advance(minutes=16)
    refreshed = await auth_manager.get_token()
    again = await auth_manager.get_token()

    assert refreshed == "token-2"
    assert again == "token-2"
    assert len(fake_jamf.token_requests) == 2


@pytest.mark.asyncio
async def test_reset_token_forces_refresh(auth_manager, fake_jamf):
    await auth_manager.get_token()
    auth_manager.reset_token()

    assert await auth_manager.get_token() == "token-2"
    assert len(fake_jamf.token_requests) == 2


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(auth_manager, fake_jamf):
    tokens = await asyncio.gather(*(auth_manager.get_token() for _ in range(5)))

    assert set(tokens) == {"token-1"}
    assert len(fake_jamf.token_requests) == 1


@pytest.mark.asyncio
async def test_token_expiry_parsed_from_response(auth_manager, clock):
    await auth_manager.get_token()

    assert auth_manager.token_cache.expires_at == clock() + timedelta(minutes=20)


"""
3. Failure Tests
"""

@pytest.mark.asyncio
async def test_non_200_raises_fetch_error(auth_manager, fake_jamf):
    fake_jamf.token_status = 401

    with pytest.raises(AuthFetchError) as exc_info:
        await auth_manager.get_token()

    assert "401" in str(exc_info.value)
    assert auth_manager.token_cache.get_valid_token() is None


@pytest.mark.asyncio
async def test_network_error_raises_fetch_error(auth_manager, fake_jamf):
    fake_jamf.network_error = "token"

    with pytest.raises(AuthFetchError) as exc_info:
        await auth_manager.get_token()

    assert "Network error" in str(exc_info.value)


@pytest.mark.asyncio
async def test_response_without_token_raises_fetch_error(settings, clock):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"expires": "2030-01-01T00:00:00Z"}))
    auth_manager = JamfAuthManager(settings, TokenCache(clock=clock), transport=transport)

    with pytest.raises(AuthFetchError):
        await auth_manager.get_token()


"""
4. API Client Credential Tests
"""

@pytest.mark.asyncio
async def test_api_client_credentials_preferred(settings, clock, fake_jamf):
    settings.JAMF_CLIENT_ID = "client-id"
    settings.JAMF_CLIENT_SECRET = "client-secret"
    auth_manager = JamfAuthManager(settings, TokenCache(clock=clock), transport=fake_jamf.transport)

    token = await auth_manager.get_token()

    assert token == "token-1"
    request = fake_jamf.token_requests[0]
    assert request.url.path == "/api/oauth/token"
    body = request.content.decode()
    assert "grant_type=client_credentials" in body
    assert "client_id=client-id" in body
    assert auth_manager.token_cache.expires_at == clock() + timedelta(minutes=20)


@pytest.mark.asyncio
@pytest.mark.parametrize("expires_in", ["soon", [1200]])
async def test_invalid_expires_in_raises_fetch_error(settings, clock, expires_in):
    settings.JAMF_CLIENT_ID = "client-id"
    settings.JAMF_CLIENT_SECRET = "client-secret"
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"access_token": "abc", "expires_in": expires_in})
    )
    auth_manager = JamfAuthManager(settings, TokenCache(clock=clock), transport=transport)

    with pytest.raises(AuthFetchError) as exc_info:
        await auth_manager.get_token()

    assert "expires_in" in str(exc_info.value)
    assert auth_manager.token_cache.get_valid_token() is None
