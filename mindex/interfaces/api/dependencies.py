"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database import async_session
from ...modules.comic.services import ComicService
from ...modules.importer.services import ImportCoordinator
from ...modules.launcher.services import LauncherService
from ...modules.library.services import LibraryService
from ...modules.settings.services import SettingsService
from ...modules.volume.services import VolumeService

DbSession = Annotated[AsyncSession, Depends(async_session)]


def get_library_service() -> LibraryService:
    """Dependency for providing a LibraryService instance."""
    return LibraryService()


def get_comic_service() -> ComicService:
    """Dependency for providing a ComicService instance."""
    return ComicService()


def get_volume_service() -> VolumeService:
    """Dependency for providing a VolumeService instance."""
    return VolumeService()


def get_settings_service() -> SettingsService:
    """Dependency for providing a SettingsService instance."""
    return SettingsService()


def get_launcher_service() -> LauncherService:
    """Dependency for providing a LauncherService instance."""
    return LauncherService()


def get_import_coordinator(request: Request) -> ImportCoordinator:
    """Dependency for the application's single ImportCoordinator.

    The coordinator is created at startup and kept on ``app.state`` so
    every request shares its import mutex.
    """
    return request.app.state.import_coordinator
