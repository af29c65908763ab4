# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings, get_settings
from app.core.enums import ResponseMode
from app.dependencies import get_jamf_auth_manager, get_orchestrator
from app.main import app
from app.services.jamf.auth import JamfAuthManager
from app.services.jamf.client import JamfClient
from app.services.jamf.token_manager import TokenCache
from app.services.snipeit.client import SnipeITClient
from app.services.sync_orchestrator import AssetSyncOrchestrator
from tests.mocks.mock_audit import MemoryAuditSink
from tests.mocks.mock_http import FakeClock, FakeJamf, FakeSnipeIT

WEBHOOK_SECRET = "test_secret"


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        _env_file=None,
        DATABASE_URL="",
        WEBHOOK_SECRET=WEBHOOK_SECRET,
        WEBHOOK_EXPECTED_HOST=None,
        WEBHOOK_RESPONSE_MODE=ResponseMode.STRICT,
        JAMF_URL="https://jamf.example.com",
        JAMF_USERNAME="api-user",
        JAMF_PASSWORD="api-pass",
        JAMF_CLIENT_ID="",
        JAMF_CLIENT_SECRET="",
        SNIPEIT_URL="https://snipe.example.com",
        SNIPEIT_API_TOKEN="snipe-token",
        ADMIN_USERNAME="admin",
        ADMIN_PASSWORD="admin-pass",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_jamf(clock):
    return FakeJamf(clock)


@pytest.fixture
def fake_snipeit():
    return FakeSnipeIT()


@pytest.fixture
def audit_sink():
    return MemoryAuditSink()


@pytest.fixture
def auth_manager(settings, clock, fake_jamf):
    return JamfAuthManager(
        settings=settings,
        token_cache=TokenCache(clock=clock),
        transport=fake_jamf.transport,
    )


@pytest.fixture
def jamf_client(settings, auth_manager, fake_jamf):
    return JamfClient(auth_manager, settings=settings, transport=fake_jamf.transport)


@pytest.fixture
def snipeit_client(settings, fake_snipeit):
    return SnipeITClient(settings=settings, transport=fake_snipeit.transport)


@pytest.fixture
def orchestrator(settings, jamf_client, snipeit_client, audit_sink, clock):
    return AssetSyncOrchestrator(
        settings=settings,
        jamf_client=jamf_client,
        audit_sink=audit_sink,
        snipeit_client=snipeit_client,
        clock=clock,
    )


@pytest.fixture
def test_client(settings, orchestrator, auth_manager):
    """Provide a test client wired to the fake Jamf and Snipe-IT servers"""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_jamf_auth_manager] = lambda: auth_manager
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def checkout_payload():
    return {
        "event": "asset.checkedout",
        "asset": {
            "serial": "C02ABC",
            "asset_tag": "18163",
            "assigned_to": {"username": "jdoe", "first_name": "Jane", "last_name": "Doe"},
            "location": {"name": "HQ"},
        },
    }


@pytest.fixture
def chat_checkout_payload():
    return {
        "channel": "#it-assets",
        "text": "Asset checked out",
        "attachments": [
            {
                "title": "MacBook 28 (18163) checked out",
                "fields": [
                    {"title": "To", "value": "<http://snipe.example.com/users/7|Jane Doe>"},
                    {"title": "Administrator", "value": "<http://snipe.example.com/users/1|Admin User>"},
                    {"title": "Location", "value": "<http://snipe.example.com/locations/3|HQ>"},
                ],
            }
        ],
    }
