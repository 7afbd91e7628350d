"""Persisted user preferences."""

from typing import Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.constants import HIDDEN_CONTENT_SETTING_KEY
from ..common.schemas import HiddenFilter
from .crud import setting_crud
from .models import Setting

logger = get_logger(__name__)


class SettingsService:
    """Service for reading and writing key/value settings.

    Values are stored as text; booleans are stored as ``"1"``/``"0"``. A key
    that was never written reads as its default.
    """

    async def get_value(self, key: str, db: AsyncSession) -> Optional[str]:
        row = await setting_crud.get(db=db, key=key)
        return row["value"] if row else None

    async def set_value(self, key: str, value: str, db: AsyncSession) -> None:
        stmt = sqlite_insert(Setting).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(index_elements=["key"], set_={"value": stmt.excluded.value})
        await db.execute(stmt)
        await db.commit()

    async def get_hidden_content_enabled(self, db: AsyncSession) -> bool:
        return await self.get_value(HIDDEN_CONTENT_SETTING_KEY, db) == "1"

    async def set_hidden_content_enabled(self, enabled: bool, db: AsyncSession) -> bool:
        await self.set_value(HIDDEN_CONTENT_SETTING_KEY, "1" if enabled else "0", db)
        logger.info(f"Hidden content {'enabled' if enabled else 'disabled'}")
        return enabled

    async def resolve_hidden_filter(self, requested: Optional[HiddenFilter], db: AsyncSession) -> HiddenFilter:
        """Return ``requested``, or the default implied by the hidden-content setting.

        Args:
            requested: Filter given by the caller, if any
            db: Database session

        Returns:
            ``include`` when hidden content is enabled, ``hide`` otherwise
        """
        if requested is not None:
            return requested
        return HiddenFilter.INCLUDE if await self.get_hidden_content_enabled(db) else HiddenFilter.HIDE
