"""Tests for persisted settings."""

import pytest

from mindex.modules.common.schemas import HiddenFilter
from mindex.modules.settings.services import SettingsService


@pytest.fixture
def settings_service():
    return SettingsService()


@pytest.mark.asyncio
async def test_hidden_content_defaults_to_disabled(settings_service, db_session):
    assert await settings_service.get_hidden_content_enabled(db_session) is False


@pytest.mark.asyncio
async def test_set_hidden_content_overwrites_previous_value(settings_service, db_session):
    await settings_service.set_hidden_content_enabled(True, db_session)
    assert await settings_service.get_hidden_content_enabled(db_session) is True

    await settings_service.set_hidden_content_enabled(False, db_session)
    assert await settings_service.get_hidden_content_enabled(db_session) is False
    assert await settings_service.get_value("hidden_content_enabled", db_session) == "0"


@pytest.mark.asyncio
async def test_resolve_hidden_filter(settings_service, db_session):
    """An explicit filter wins; otherwise the setting decides."""
    assert await settings_service.resolve_hidden_filter(None, db_session) is HiddenFilter.HIDE
    assert await settings_service.resolve_hidden_filter(HiddenFilter.ONLY, db_session) is HiddenFilter.ONLY

    await settings_service.set_hidden_content_enabled(True, db_session)

    assert await settings_service.resolve_hidden_filter(None, db_session) is HiddenFilter.INCLUDE
    assert await settings_service.resolve_hidden_filter(HiddenFilter.HIDE, db_session) is HiddenFilter.HIDE
