"""Unit tests for tracking pixel sanitizing and the process-wide registry."""

import pytest
from services.storefront_service.services.pixels import (
    PixelRegistry,
    TrackingPixels,
    get_pixel_registry,
    init_pixel_registry,
    sanitize_pixel_id,
    teardown_pixel_registry,
)
from services.storefront_service.services.platform_settings import (
    TRACKING_PIXELS_KEY,
    get_platform_setting,
    set_platform_setting,
)


@pytest.mark.unit
def test_sanitize_strips_unsafe_characters():
    assert sanitize_pixel_id("123'</script>") == "123script"
    assert sanitize_pixel_id("ABC_123") == "ABC_123"
    assert sanitize_pixel_id("<>'") is None
    assert sanitize_pixel_id("") is None


@pytest.mark.unit
def test_snippets_only_for_configured_pixels():
    assert TrackingPixels().snippets() == []

    snippets = TrackingPixels(facebook_pixel_id="111").snippets()

    assert len(snippets) == 1
    assert "fbq('init','111')" in snippets[0]


@pytest.mark.unit
def test_from_setting_sanitizes_stored_values():
    pixels = TrackingPixels.from_setting(
        {"facebookPixelId": "1'2", "tiktokPixelId": None}
    )

    assert pixels.facebook_pixel_id == "12"
    assert pixels.tiktok_pixel_id is None


@pytest.mark.unit
def test_registry_accessor_requires_init():
    teardown_pixel_registry()
    with pytest.raises(RuntimeError):
        get_pixel_registry()

    registry = init_pixel_registry()
    assert get_pixel_registry() is registry
    teardown_pixel_registry()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_registry_update_persists_and_caches(db_session):
    registry = PixelRegistry()

    pixels = await registry.update(db_session, "FB-1", " tt_2 ")
    await db_session.commit()

    assert pixels.facebook_pixel_id == "FB1"
    assert pixels.tiktok_pixel_id == "tt_2"
    assert await get_platform_setting(db_session, TRACKING_PIXELS_KEY) == {
        "facebookPixelId": "FB1",
        "tiktokPixelId": "tt_2",
    }


@pytest.mark.asyncio
@pytest.mark.unit
async def test_registry_serves_cache_until_stale(db_session):
    registry = PixelRegistry(ttl_seconds=3600)
    await registry.get(db_session)

    await set_platform_setting(
        db_session, TRACKING_PIXELS_KEY, {"facebookPixelId": "999"}
    )
    await db_session.commit()

    assert (await registry.get(db_session)).facebook_pixel_id is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stale_registry_reloads_from_database(db_session):
    registry = PixelRegistry(ttl_seconds=-1)
    await set_platform_setting(
        db_session, TRACKING_PIXELS_KEY, {"tiktokPixelId": "TT9"}
    )
    await db_session.commit()

    assert (await registry.get(db_session)).tiktok_pixel_id == "TT9"
