"""Test configuration and fixtures for the mindex catalog."""

import os
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Set test environment variables before the settings module is imported
os.environ["SQLITE_URI"] = ":memory:"
os.environ["SQLITE_ASYNC_PREFIX"] = "sqlite+aiosqlite:///"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["IMPORT_ARCHIVE_EXTENSIONS"] = ".cbz"

from mindex.infrastructure.logging import configure_testing_logging, mark_logging_configured  # noqa: E402

mark_logging_configured()
configure_testing_logging()

from mindex.infrastructure.database import create_catalog_engine, run_migrations  # noqa: E402
from mindex.infrastructure.database.session import async_session  # noqa: E402
from mindex.interfaces.api.dependencies import get_import_coordinator  # noqa: E402
from mindex.interfaces.main import app  # noqa: E402
from mindex.modules.importer.services import ImportCoordinator  # noqa: E402
from mindex.modules.library.models import Library  # noqa: E402

ComicFactory = Callable[..., Path]


@pytest_asyncio.fixture(scope="function")
async def test_db_engine(tmp_path: Path):
    """Create a migrated catalog in a per-test SQLite file."""
    engine = create_catalog_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await run_migrations(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test catalog."""
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def coordinator(session_factory) -> ImportCoordinator:
    """Import coordinator writing to the test catalog."""
    return ImportCoordinator(session_factory, archive_extensions=(".cbz",))


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, coordinator: ImportCoordinator):
    """Create a test client whose requests use the test catalog and coordinator."""
    app.dependency_overrides = {}

    async def override_get_db():
        """Each request gets its own database session."""
        async with session_factory() as session:
            yield session

    app.dependency_overrides[async_session] = override_get_db
    app.dependency_overrides[get_import_coordinator] = lambda: coordinator

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def comics_root(tmp_path: Path) -> Path:
    """An empty import root."""
    root = tmp_path / "Comics"
    root.mkdir()
    return root


@pytest.fixture
def make_comic() -> ComicFactory:
    """Build a comic directory on disk.

    Example:
        ```python
        make_comic(root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Vol. 1.cbz", "Foo Ch. 3.cbz"]}, files=["cover.jpg"])
        ```
    """

    def _make_comic(
        root: Path,
        folder: str,
        volumes: Optional[Dict[str, Iterable[str]]] = None,
        files: Iterable[str] = (),
    ) -> Path:
        comic_dir = root / folder
        comic_dir.mkdir(parents=True, exist_ok=True)
        for name in files:
            (comic_dir / name).write_bytes(b"")
        for volume_folder, archives in (volumes or {}).items():
            volume_dir = comic_dir / volume_folder
            volume_dir.mkdir(exist_ok=True)
            for name in archives:
                (volume_dir / name).write_bytes(b"")
        return comic_dir

    return _make_comic


@pytest.fixture
def make_undecodable_entry() -> Callable[..., None]:
    """Create a file or folder whose name is not valid UTF-8.

    Skips the test where the platform or filesystem cannot hold such names.
    """
    if sys.platform != "linux" or sys.getfilesystemencoding() != "utf-8":
        pytest.skip("needs a filesystem that stores raw byte names")

    def _make(parent: Path, name: bytes, is_dir: bool = False) -> None:
        path = os.path.join(os.fsencode(parent), name)
        try:
            if is_dir:
                os.mkdir(path)
            else:
                with open(path, "wb"):
                    pass
        except OSError as e:
            pytest.skip(f"filesystem rejects non-UTF-8 names: {e}")

    return _make


async def _add_library(db_session: AsyncSession, name: str, is_hidden: bool = False) -> Dict:
    library = Library(name=name, description=f"{name} shelf", is_hidden=is_hidden)
    db_session.add(library)
    await db_session.commit()
    return {"id": library.id, "name": library.name, "is_hidden": library.is_hidden}


@pytest_asyncio.fixture
async def test_library(db_session: AsyncSession):
    """Create a visible test library."""
    return await _add_library(db_session, "Manga")


@pytest_asyncio.fixture
async def test_library_2(db_session: AsyncSession):
    """Create a second visible library."""
    return await _add_library(db_session, "Bande Dessinee")


@pytest_asyncio.fixture
async def hidden_library(db_session: AsyncSession):
    """Create a hidden library."""
    return await _add_library(db_session, "Private", is_hidden=True)
