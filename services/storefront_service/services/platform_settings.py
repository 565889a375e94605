"""Read/write helpers for the key/JSON ``platform_settings`` table."""

from typing import Any, Optional

from libs.common.datetime_utils import utc_now
from services.storefront_service.models import PlatformSetting
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

TRACKING_PIXELS_KEY = "tracking_pixels"
TARIFFS_KEY = "tariffs"
WABA_CONFIG_KEY = "waba_config"


async def get_platform_setting(db: AsyncSession, key: str) -> Optional[Any]:
    result = await db.execute(select(PlatformSetting).where(PlatformSetting.key == key))
    setting = result.scalar_one_or_none()
    return setting.value if setting else None


async def set_platform_setting(db: AsyncSession, key: str, value: Any) -> PlatformSetting:
    """Insert or replace a setting. The caller commits."""
    result = await db.execute(select(PlatformSetting).where(PlatformSetting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        setting = PlatformSetting(key=key, value=value)
        db.add(setting)
    else:
        setting.value = value
        setting.updated_at = utc_now()
    await db.flush()
    return setting
