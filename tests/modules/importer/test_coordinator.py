"""Tests for the import coordinator: import passes, refreshes and clears."""

import asyncio
import os
from pathlib import Path

import pytest
from sqlalchemy import select, update

from mindex.modules.chapter.models import Chapter
from mindex.modules.comic.models import Comic
from mindex.modules.common.exceptions import ResourceNotFoundError, ScanError, ValidationError
from mindex.modules.importer import services as importer_services
from mindex.modules.importer.models import ImportDirectory
from mindex.modules.importer.services import ImportCoordinator
from mindex.modules.library.models import Library
from mindex.modules.settings.models import Setting
from mindex.modules.volume.models import Volume


async def all_rows(session_factory, model):
    async with session_factory() as db:
        return (await db.execute(select(model))).scalars().all()


async def comics_by_name(session_factory):
    async with session_factory() as db:
        result = await db.execute(select(Comic).order_by(Comic.name))
        return {comic.name: comic for comic in result.scalars().all()}


@pytest.mark.asyncio
async def test_import_example_tree(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """One comic, one volume with its file, one chapter and one extra."""
    make_comic(
        comics_root,
        "Foo (Bar)",
        volumes={"Vol. 1": ["Foo Vol. 1.cbz", "Foo Ch. 3.cbz", "Foo Extra 1.cbz"]},
    )

    result = await coordinator.import_root(str(comics_root), test_library["id"])

    assert (result.imported, result.updated) == (1, 0)

    comics = await all_rows(session_factory, Comic)
    assert [(c.name, c.author, c.library_id) for c in comics] == [("Foo", "Bar", test_library["id"])]
    assert comics[0].directory == os.path.join(str(comics_root), "Foo (Bar)")

    volumes = await all_rows(session_factory, Volume)
    assert [(v.comic_id, v.number) for v in volumes] == [(comics[0].id, 1)]
    assert volumes[0].file == os.path.join(str(comics_root), "Foo (Bar)", "Vol. 1", "Foo Vol. 1.cbz")

    chapters = await all_rows(session_factory, Chapter)
    assert sorted((c.number, c.kind) for c in chapters) == [(1, "extra"), (3, "chapter")]


@pytest.mark.asyncio
async def test_import_skips_folders_that_are_not_comics(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """Three valid folders and one invalid one: three comics, no error."""
    for folder in ("Foo (Bar)", "Baz (Qux)", "Quux (Corge)", "Unsorted"):
        make_comic(comics_root, folder, volumes={"Vol. 1": ["Ch. 1.cbz"]})

    result = await coordinator.import_root(str(comics_root), test_library["id"])

    assert result.imported + result.updated == 3
    assert result.total == 3
    assert sorted(c.name for c in await all_rows(session_factory, Comic)) == ["Baz", "Foo", "Quux"]


@pytest.mark.asyncio
async def test_reimport_is_idempotent_and_keeps_user_flags(
    coordinator: ImportCoordinator,
    session_factory,
    comics_root: Path,
    make_comic,
    hidden_library: dict,
):
    """A second pass updates every comic and changes no id, favorite or visibility."""
    make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    make_comic(comics_root, "Baz (Qux)", volumes={"Vol. 2": ["Baz Ch. 7.cbz"]})

    first = await coordinator.import_root(str(comics_root), hidden_library["id"])
    before = await comics_by_name(session_factory)
    async with session_factory() as db:
        await db.execute(update(Comic).where(Comic.name == "Foo").values(favorite=True))
        await db.commit()

    second = await coordinator.import_root(str(comics_root), hidden_library["id"])

    assert (first.imported, first.updated) == (2, 0)
    assert (second.imported, second.updated) == (0, 2)

    after = await comics_by_name(session_factory)
    assert {name: comic.id for name, comic in after.items()} == {name: comic.id for name, comic in before.items()}
    assert after["Foo"].favorite is True
    assert after["Baz"].favorite is False

    libraries = await all_rows(session_factory, Library)
    assert [library.is_hidden for library in libraries] == [True]


@pytest.mark.asyncio
async def test_renamed_folder_updates_existing_comic(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """Same name and author in a new folder: the row moves, no duplicate appears."""
    original = make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    await coordinator.import_root(str(comics_root), test_library["id"])
    comic_id = (await all_rows(session_factory, Comic))[0].id
    async with session_factory() as db:
        await db.execute(update(Comic).values(favorite=True))
        await db.commit()

    renamed = comics_root / "Foo   (Bar)"
    original.rename(renamed)
    result = await coordinator.import_root(str(comics_root), test_library["id"])

    assert (result.imported, result.updated) == (0, 1)
    comics = await all_rows(session_factory, Comic)
    assert len(comics) == 1
    assert comics[0].id == comic_id
    assert comics[0].directory == str(renamed)
    assert comics[0].favorite is True


@pytest.mark.asyncio
async def test_refresh_comic_drops_deleted_chapter(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """Removing a chapter file and refreshing removes its row."""
    comic_dir = make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz", "Foo Ch. 2.cbz"]})
    await coordinator.import_root(str(comics_root), test_library["id"])
    comic = (await all_rows(session_factory, Comic))[0]

    (comic_dir / "Vol. 1" / "Foo Ch. 2.cbz").unlink()
    result = await coordinator.refresh_comic(comic.id)

    assert (result.imported, result.updated) == (0, 1)
    assert [chapter.number for chapter in await all_rows(session_factory, Chapter)] == [1]
    refreshed = (await all_rows(session_factory, Comic))[0]
    assert (refreshed.id, refreshed.library_id) == (comic.id, test_library["id"])


@pytest.mark.asyncio
async def test_refresh_comic_unknown_id(coordinator: ImportCoordinator):
    assert await coordinator.refresh_comic(999) is None


@pytest.mark.asyncio
async def test_refresh_comic_with_unparseable_directory(
    coordinator: ImportCoordinator, session_factory, tmp_path: Path, test_library: dict
):
    """A stored directory whose name no longer parses is rejected."""
    folder = tmp_path / "not a comic"
    folder.mkdir()
    async with session_factory() as db:
        comic = Comic(name="Foo", author="Bar", directory=str(folder), library_id=test_library["id"])
        db.add(comic)
        await db.commit()

    with pytest.raises(ValidationError):
        await coordinator.refresh_comic(comic.id)


@pytest.mark.asyncio
async def test_refresh_comic_with_missing_directory(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """A comic whose folder vanished fails with ScanError and keeps its rows."""
    comic_dir = make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    await coordinator.import_root(str(comics_root), test_library["id"])
    comic = (await all_rows(session_factory, Comic))[0]

    (comic_dir / "Vol. 1" / "Foo Ch. 1.cbz").unlink()
    (comic_dir / "Vol. 1").rmdir()
    comic_dir.rmdir()

    with pytest.raises(ScanError):
        await coordinator.refresh_comic(comic.id)
    assert len(await all_rows(session_factory, Chapter)) == 1


@pytest.mark.asyncio
async def test_clear_import_directory_leaves_sibling_roots(
    coordinator: ImportCoordinator, session_factory, tmp_path: Path, make_comic, test_library: dict
):
    """Only comics under the cleared root are removed, even when a sibling shares its prefix."""
    manga = tmp_path / "Manga"
    manga_extra = tmp_path / "Manga Extra"
    make_comic(manga, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    make_comic(manga, "Baz (Qux)")
    make_comic(manga_extra, "Quux (Corge)", volumes={"Vol. 1": ["Quux Ch. 1.cbz"]})

    await coordinator.import_root(str(manga), test_library["id"])
    await coordinator.import_root(str(manga_extra), test_library["id"])
    directories = {d.path: d.id for d in await coordinator.list_import_directories()}

    assert await coordinator.clear_import_directory(directories[str(manga)]) is True

    assert [comic.name for comic in await all_rows(session_factory, Comic)] == ["Quux"]
    assert [volume.number for volume in await all_rows(session_factory, Volume)] == [1]
    assert [d.path for d in await coordinator.list_import_directories()] == [str(manga_extra)]


@pytest.mark.asyncio
async def test_clear_unknown_import_directory(coordinator: ImportCoordinator):
    assert await coordinator.clear_import_directory(999) is False


@pytest.mark.asyncio
async def test_import_tracks_directory_and_moves_it_between_libraries(
    coordinator: ImportCoordinator, comics_root: Path, make_comic, test_library: dict, test_library_2: dict
):
    """Importing the same root again updates the tracked library instead of adding a row."""
    make_comic(comics_root, "Foo (Bar)")

    await coordinator.import_root(str(comics_root), test_library["id"])
    await coordinator.import_root(str(comics_root) + os.sep, test_library_2["id"])

    directories = await coordinator.list_import_directories()
    assert [(d.path, d.library_id) for d in directories] == [(str(comics_root), test_library_2["id"])]


@pytest.mark.asyncio
async def test_refresh_import_directory(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """Refreshing a tracked root picks up comics added since the last import."""
    make_comic(comics_root, "Foo (Bar)")
    await coordinator.import_root(str(comics_root), test_library["id"])
    make_comic(comics_root, "Baz (Qux)")
    directory_id = (await coordinator.list_import_directories())[0].id

    result = await coordinator.refresh_import_directory(directory_id)

    assert (result.imported, result.updated) == (1, 1)
    assert len(await all_rows(session_factory, Comic)) == 2


@pytest.mark.asyncio
async def test_refresh_import_directory_of_deleted_library(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    make_comic(comics_root, "Foo (Bar)")
    await coordinator.import_root(str(comics_root), test_library["id"])
    async with session_factory() as db:
        await db.delete(await db.get(Library, test_library["id"]))
        await db.commit()
    directory = (await coordinator.list_import_directories())[0]

    assert directory.library_id is None
    assert (await all_rows(session_factory, Comic))[0].library_id is None
    with pytest.raises(ValidationError):
        await coordinator.refresh_import_directory(directory.id)


@pytest.mark.asyncio
async def test_refresh_unknown_import_directory(coordinator: ImportCoordinator):
    assert await coordinator.refresh_import_directory(999) is None


@pytest.mark.asyncio
async def test_import_into_unknown_library(coordinator: ImportCoordinator, comics_root: Path, make_comic):
    make_comic(comics_root, "Foo (Bar)")

    with pytest.raises(ResourceNotFoundError):
        await coordinator.import_root(str(comics_root), 999)


@pytest.mark.asyncio
async def test_import_missing_root(coordinator: ImportCoordinator, tmp_path: Path, test_library: dict):
    with pytest.raises(ScanError):
        await coordinator.import_root(str(tmp_path / "missing"), test_library["id"])
    assert await coordinator.list_import_directories() == []


@pytest.mark.asyncio
async def test_unreadable_comic_aborts_whole_pass(
    coordinator: ImportCoordinator,
    session_factory,
    comics_root: Path,
    make_comic,
    test_library: dict,
    monkeypatch: pytest.MonkeyPatch,
):
    """A scan failure on one comic leaves the catalog untouched."""
    make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    make_comic(comics_root, "Baz (Qux)", volumes={"Vol. 1": ["Baz Ch. 1.cbz"]})

    real_scan = importer_services.scan_comic_directory

    def failing_scan(directory, identity, archive_extensions):
        if identity.name == "Baz":
            raise ScanError(directory, "Permission denied")
        return real_scan(directory, identity, archive_extensions)

    monkeypatch.setattr(importer_services, "scan_comic_directory", failing_scan)

    with pytest.raises(ScanError):
        await coordinator.import_root(str(comics_root), test_library["id"])

    assert await all_rows(session_factory, Comic) == []
    assert await coordinator.list_import_directories() == []


@pytest.mark.asyncio
async def test_imports_are_serialized(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    """Concurrent imports of the same root queue up instead of interleaving."""
    make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})

    results = await asyncio.gather(
        coordinator.import_root(str(comics_root), test_library["id"]),
        coordinator.import_root(str(comics_root), test_library["id"]),
    )

    assert sorted((r.imported, r.updated) for r in results) == [(0, 1), (1, 0)]
    assert len(await all_rows(session_factory, Comic)) == 1
    assert coordinator.is_importing is False


@pytest.mark.asyncio
async def test_is_importing_while_pass_runs(
    coordinator: ImportCoordinator, comics_root: Path, make_comic, test_library: dict, monkeypatch: pytest.MonkeyPatch
):
    make_comic(comics_root, "Foo (Bar)")
    seen = []

    real_scan = importer_services.scan_comic_directory

    def observing_scan(directory, identity, archive_extensions):
        seen.append(coordinator.is_importing)
        return real_scan(directory, identity, archive_extensions)

    monkeypatch.setattr(importer_services, "scan_comic_directory", observing_scan)

    await coordinator.import_root(str(comics_root), test_library["id"])

    assert seen == [True]
    assert coordinator.is_importing is False


@pytest.mark.asyncio
async def test_clear_all_wipes_every_table(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    await coordinator.import_root(str(comics_root), test_library["id"])
    async with session_factory() as db:
        db.add(Setting(key="hidden_content_enabled", value="1"))
        await db.commit()

    await coordinator.clear_all()

    for model in (Library, Comic, Volume, Chapter, ImportDirectory, Setting):
        assert await all_rows(session_factory, model) == []


@pytest.mark.asyncio
async def test_list_import_directories_ordered_by_path(
    coordinator: ImportCoordinator, tmp_path: Path, make_comic, test_library: dict, test_library_2: dict
):
    manga, bd = tmp_path / "manga", tmp_path / "bd"
    make_comic(manga, "Foo (Bar)")
    make_comic(bd, "Tintin (Herge)")

    await coordinator.import_root(str(manga), test_library["id"])
    await coordinator.import_root(str(bd), test_library_2["id"])

    directories = await coordinator.list_import_directories()

    assert [(d.path, d.library_id) for d in directories] == [
        (str(bd), test_library_2["id"]),
        (str(manga), test_library["id"]),
    ]
    assert all(isinstance(d.id, int) and d.created_at is not None for d in directories)


@pytest.mark.asyncio
async def test_import_skips_undecodable_names_and_keeps_siblings(
    coordinator: ImportCoordinator,
    session_factory,
    comics_root: Path,
    make_comic,
    make_undecodable_entry,
    test_library: dict,
):
    """A badly encoded file name in one comic does not cost the other comics their import."""
    make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    baz = make_comic(comics_root, "Baz (Qux)", volumes={"Vol. 1": ["Baz Ch. 1.cbz"]})
    make_undecodable_entry(baz / "Vol. 1", b"Baz Ch. 2 \xff.cbz")
    make_undecodable_entry(comics_root, b"Bad \xff (Name)", is_dir=True)

    result = await coordinator.import_root(str(comics_root), test_library["id"])

    assert (result.imported, result.updated) == (2, 0)
    assert sorted(c.name for c in await all_rows(session_factory, Comic)) == ["Baz", "Foo"]
    assert sorted(c.number for c in await all_rows(session_factory, Chapter)) == [1, 1]


@pytest.mark.asyncio
async def test_import_root_that_is_not_utf8_raises_scan_error(
    coordinator: ImportCoordinator, session_factory, tmp_path: Path, test_library: dict
):
    with pytest.raises(ScanError):
        await coordinator.import_root(str(tmp_path) + "/Comics \udcff", test_library["id"])

    assert await all_rows(session_factory, ImportDirectory) == []


@pytest.mark.asyncio
async def test_import_skips_volume_numbers_the_catalog_cannot_store(
    coordinator: ImportCoordinator, session_factory, comics_root: Path, make_comic, test_library: dict
):
    make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
    make_comic(comics_root, "Big (Num)", volumes={"Vol. 123456789012345678901": ["Big Ch. 1.cbz"]})

    result = await coordinator.import_root(str(comics_root), test_library["id"])

    assert (result.imported, result.updated) == (2, 0)
    volumes = await all_rows(session_factory, Volume)
    assert [v.number for v in volumes] == [1]
