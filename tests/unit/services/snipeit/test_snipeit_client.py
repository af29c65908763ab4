import pytest

from app.core.exceptions import ConfigError, SnipeITAPIError
from app.services.snipeit.client import SnipeITClient
from tests.mocks.mock_http import FakeSnipeIT


@pytest.mark.asyncio
async def test_resolve_serial_exact_match(snipeit_client, fake_snipeit):
    serial = await snipeit_client.resolve_serial("18163")

    assert serial == "C02ABC"
    request = fake_snipeit.requests[0]
    assert request.url.params["search"] == "18163"
    assert request.headers["Authorization"] == "Bearer snipe-token"


@pytest.mark.asyncio
async def test_resolve_serial_ignores_partial_matches(settings):
    fake = FakeSnipeIT(rows=[
        {"asset_tag": "181630", "serial": "OTHER1"},
        {"asset_tag": "918163", "serial": "OTHER2"},
    ])
    client = SnipeITClient(settings=settings, transport=fake.transport)

    assert await client.resolve_serial("18163") is None


@pytest.mark.asyncio
async def test_resolve_serial_no_rows(settings):
    fake = FakeSnipeIT(rows=[])
    client = SnipeITClient(settings=settings, transport=fake.transport)

    assert await client.resolve_serial("18163") is None


@pytest.mark.asyncio
async def test_resolve_serial_match_without_serial(settings):
    fake = FakeSnipeIT(rows=[{"asset_tag": "18163", "serial": ""}])
    client = SnipeITClient(settings=settings, transport=fake.transport)

    assert await client.resolve_serial("18163") is None


@pytest.mark.asyncio
async def test_resolve_serial_non_200(snipeit_client, fake_snipeit):
    fake_snipeit.status = 403

    with pytest.raises(SnipeITAPIError) as exc_info:
        await snipeit_client.resolve_serial("18163")

    assert "403" in str(exc_info.value)


@pytest.mark.asyncio
async def test_resolve_serial_requires_configuration(settings, fake_snipeit):
    settings.SNIPEIT_API_TOKEN = ""
    client = SnipeITClient(settings=settings, transport=fake_snipeit.transport)

    with pytest.raises(ConfigError):
        await client.resolve_serial("18163")

    assert fake_snipeit.requests == []
