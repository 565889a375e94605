"""Platform tracking pixels (Facebook, TikTok).

The configured ids live in the ``tracking_pixels`` platform setting. A single
``PixelRegistry`` per process caches them for the public endpoint; the app
lifespan creates it with ``init_pixel_registry`` and releases it with
``teardown_pixel_registry``. Cached ids are re-read from the database once
they are older than the registry TTL, so workers converge after an update
made elsewhere.
"""

import re
import time
from dataclasses import dataclass
from typing import Optional

from libs.common.logging import get_logger
from services.storefront_service.services.platform_settings import (
    TRACKING_PIXELS_KEY,
    get_platform_setting,
    set_platform_setting,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")

DEFAULT_TTL_SECONDS = 300

FACEBOOK_SNIPPET = (
    "<script>!function(f,b,e,v,n,t,s){{if(f.fbq)return;n=f.fbq=function(){{"
    "n.callMethod?n.callMethod.apply(n,arguments):n.queue.push(arguments)}};"
    "if(!f._fbq)f._fbq=n;n.push=n;n.loaded=!0;n.version='2.0';n.queue=[];"
    "t=b.createElement(e);t.async=!0;t.src=v;s=b.getElementsByTagName(e)[0];"
    "s.parentNode.insertBefore(t,s)}}(window,document,'script',"
    "'https://connect.facebook.net/en_US/fbevents.js');"
    "fbq('init','{pixel_id}');fbq('track','PageView');</script>"
)

TIKTOK_SNIPPET = (
    '<script id="tt-pixel-platform">!function(w,d,t){{w.TiktokAnalyticsObject=t;'
    "var ttq=w[t]=w[t]||[];ttq.methods=['page','track','identify','instances',"
    "'debug','on','off','once','ready','alias','group','enableCookie',"
    "'disableCookie'];ttq.setAndDefer=function(t,e){{t[e]=function(){{"
    "t.push([e].concat(Array.prototype.slice.call(arguments,0)))}}}};"
    "for(var i=0;i<ttq.methods.length;i++)ttq.setAndDefer(ttq,ttq.methods[i]);"
    "ttq.load=function(e){{var r='https://analytics.tiktok.com/i18n/pixel/events.js';"
    "var a=d.createElement('script');a.async=!0;a.src=r+'?sdkid='+e+'&lib='+t;"
    "var s=d.getElementsByTagName('script')[0];s.parentNode.insertBefore(a,s)}};"
    "ttq.load('{pixel_id}');ttq.page()}}(window,document,'ttq');</script>"
)


def sanitize_pixel_id(value: Optional[str]) -> Optional[str]:
    """Keep ``[A-Za-z0-9_]`` only; empty results become None."""
    if not value:
        return None
    cleaned = _UNSAFE_ID_CHARS.sub("", value)
    return cleaned or None


@dataclass
class TrackingPixels:
    facebook_pixel_id: Optional[str] = None
    tiktok_pixel_id: Optional[str] = None

    def to_setting(self) -> dict:
        return {
            "facebookPixelId": self.facebook_pixel_id,
            "tiktokPixelId": self.tiktok_pixel_id,
        }

    @classmethod
    def from_setting(cls, value: Optional[dict]) -> "TrackingPixels":
        value = value or {}
        return cls(
            facebook_pixel_id=sanitize_pixel_id(value.get("facebookPixelId")),
            tiktok_pixel_id=sanitize_pixel_id(value.get("tiktokPixelId")),
        )

    def snippets(self) -> list[str]:
        rendered = []
        if self.facebook_pixel_id:
            rendered.append(FACEBOOK_SNIPPET.format(pixel_id=self.facebook_pixel_id))
        if self.tiktok_pixel_id:
            rendered.append(TIKTOK_SNIPPET.format(pixel_id=self.tiktok_pixel_id))
        return rendered


class PixelRegistry:
    """Process-wide cache of the platform tracking pixels."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self.pixels = TrackingPixels()
        self._loaded_at: Optional[float] = None

    @property
    def is_stale(self) -> bool:
        return (
            self._loaded_at is None
            or time.monotonic() - self._loaded_at > self.ttl_seconds
        )

    async def load(self, db: AsyncSession) -> TrackingPixels:
        value = await get_platform_setting(db, TRACKING_PIXELS_KEY)
        self.pixels = TrackingPixels.from_setting(value)
        self._loaded_at = time.monotonic()
        return self.pixels

    async def get(self, db: AsyncSession) -> TrackingPixels:
        if self.is_stale:
            await self.load(db)
        return self.pixels

    async def update(
        self,
        db: AsyncSession,
        facebook_pixel_id: Optional[str],
        tiktok_pixel_id: Optional[str],
    ) -> TrackingPixels:
        """Sanitize, persist and cache new ids. Caller commits."""
        pixels = TrackingPixels(
            facebook_pixel_id=sanitize_pixel_id(facebook_pixel_id),
            tiktok_pixel_id=sanitize_pixel_id(tiktok_pixel_id),
        )
        await set_platform_setting(db, TRACKING_PIXELS_KEY, pixels.to_setting())
        self.pixels = pixels
        self._loaded_at = time.monotonic()
        return pixels


_registry: Optional[PixelRegistry] = None


def init_pixel_registry(ttl_seconds: float = DEFAULT_TTL_SECONDS) -> PixelRegistry:
    global _registry
    _registry = PixelRegistry(ttl_seconds=ttl_seconds)
    logger.info("Pixel registry initialized")
    return _registry


def teardown_pixel_registry() -> None:
    global _registry
    _registry = None


def get_pixel_registry() -> PixelRegistry:
    """FastAPI dependency; the registry must have been initialized."""
    if _registry is None:
        raise RuntimeError("Pixel registry is not initialized")
    return _registry
