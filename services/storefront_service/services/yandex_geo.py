"""Yandex address suggestions and geocoding.

Both endpoints degrade instead of failing: with no API key, or when Yandex is
unreachable, callers get an empty result and ``available=False`` so address
entry falls back to plain text.
"""

from dataclasses import dataclass, field
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

GEOCODE_URL = "https://geocode-maps.yandex.ru/1.x/"
MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 5


@dataclass
class Suggestion:
    display_name: str
    value: str


@dataclass
class SuggestResult:
    available: bool
    suggestions: list[Suggestion] = field(default_factory=list)


@dataclass
class GeoPoint:
    address: str
    coordinates: list[float]  # [lon, lat]


class YandexGeoClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        suggest_url: Optional[str] = None,
        timeout: float = 5.0,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.YANDEX_MAPS_API_KEY
        self.suggest_url = suggest_url or settings.YANDEX_SUGGEST_URL
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def suggest(self, text: str, results: int = MAX_SUGGESTIONS) -> SuggestResult:
        text = (text or "").strip()
        if not self.is_configured:
            return SuggestResult(available=False)
        if len(text) < MIN_QUERY_LENGTH:
            return SuggestResult(available=True)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.suggest_url,
                    params={
                        "apikey": self.api_key,
                        "text": text,
                        "results": results,
                        "lang": "ru_RU",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Yandex suggest failed: {e}")
            return SuggestResult(available=False)

        suggestions = []
        for item in data.get("results", [])[:results]:
            title = (item.get("title") or {}).get("text", "")
            subtitle = (item.get("subtitle") or {}).get("text", "")
            formatted = (item.get("address") or {}).get("formatted_address")
            display = f"{title}, {subtitle}" if subtitle else title
            if display:
                suggestions.append(
                    Suggestion(display_name=display, value=formatted or display)
                )
        return SuggestResult(available=True, suggestions=suggestions)

    async def geocode(self, address: str) -> Optional[GeoPoint]:
        """First match for an address, or None."""
        if not self.is_configured or not address:
            return None
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    GEOCODE_URL,
                    params={
                        "apikey": self.api_key,
                        "geocode": address,
                        "format": "json",
                        "results": 1,
                        "lang": "ru_RU",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Yandex geocode failed: {e}")
            return None

        members = (
            data.get("response", {})
            .get("GeoObjectCollection", {})
            .get("featureMember", [])
        )
        if not members:
            return None
        geo = members[0].get("GeoObject", {})
        pos = geo.get("Point", {}).get("pos", "")
        try:
            lon, lat = (float(part) for part in pos.split())
        except ValueError:
            return None
        name = (
            geo.get("metaDataProperty", {})
            .get("GeocoderMetaData", {})
            .get("text", address)
        )
        return GeoPoint(address=name, coordinates=[lon, lat])

