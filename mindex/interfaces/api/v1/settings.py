"""Settings API endpoints."""

from fastapi import APIRouter, Depends

from ....modules.settings.schemas import HiddenContentSetting
from ....modules.settings.services import SettingsService
from ..dependencies import DbSession, get_settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get(
    "/hidden-content",
    summary="Get Hidden Content Setting",
    description="Whether hidden libraries and their comics are listed by default.",
)
async def get_hidden_content(
    db: DbSession,
    settings_service: SettingsService = Depends(get_settings_service),
) -> HiddenContentSetting:
    return HiddenContentSetting(enabled=await settings_service.get_hidden_content_enabled(db))


@router.put(
    "/hidden-content",
    summary="Set Hidden Content Setting",
    description="""Turns listing of hidden content on or off.

    When on, listings without an explicit `hidden_filter` include hidden
    libraries and their comics; when off, they leave them out.
    """,
)
async def set_hidden_content(
    setting: HiddenContentSetting,
    db: DbSession,
    settings_service: SettingsService = Depends(get_settings_service),
) -> HiddenContentSetting:
    return HiddenContentSetting(enabled=await settings_service.set_hidden_content_enabled(setting.enabled, db))
