from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.models.setting import Setting

logger = structlog.get_logger(__name__)


class SettingsService:
    async def get_all(self, db: AsyncSession) -> dict[str, Optional[str]]:
        result = await db.execute(select(Setting).order_by(Setting.key))
        return {s.key: s.value for s in result.scalars().all()}

    async def put(self, db: AsyncSession, key: str, value: Optional[str]) -> None:
        """Insert or replace a setting."""
        await db.merge(Setting(key=key, value=value))
        await db.flush()
        logger.info("setting_saved", key=key)


settings_service = SettingsService()
