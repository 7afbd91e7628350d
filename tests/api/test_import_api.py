"""API tests for Import endpoints."""

from pathlib import Path
from typing import Any, Dict

import pytest
from httpx import AsyncClient


async def import_root(client: AsyncClient, root: Path, library_id: int):
    return await client.post("/api/v1/import/", json={"path": str(root), "library_id": library_id})


class TestImportAPI:
    """API tests for import endpoints."""

    @pytest.mark.asyncio
    async def test_import_and_reimport(
        self, client: AsyncClient, comics_root: Path, make_comic, test_library: Dict[str, Any]
    ):
        make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
        make_comic(comics_root, "Not a comic")

        response = await import_root(client, comics_root, test_library["id"])
        assert response.status_code == 200
        assert response.json() == {"imported": 1, "updated": 0}

        response = await import_root(client, comics_root, test_library["id"])
        assert response.json() == {"imported": 0, "updated": 1}

    @pytest.mark.asyncio
    async def test_import_errors(self, client: AsyncClient, comics_root: Path, test_library: Dict[str, Any]):
        response = await import_root(client, comics_root / "missing", test_library["id"])
        assert response.status_code == 400

        response = await import_root(client, comics_root, 999)
        assert response.status_code == 404

        response = await client.post("/api/v1/import/", json={"path": "", "library_id": test_library["id"]})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_import_status(self, client: AsyncClient):
        response = await client.get("/api/v1/import/status")

        assert response.status_code == 200
        assert response.json() == {"in_progress": False}

    @pytest.mark.asyncio
    async def test_import_directories_are_tracked(
        self,
        client: AsyncClient,
        tmp_path: Path,
        make_comic,
        test_library: Dict[str, Any],
        test_library_2: Dict[str, Any],
    ):
        """Re-importing a root into another library moves the tracking row."""
        manga, bd = tmp_path / "manga", tmp_path / "bd"
        make_comic(manga, "Foo (Bar)")
        make_comic(bd, "Tintin (Herge)")

        await import_root(client, manga, test_library["id"])
        await import_root(client, bd, test_library["id"])
        await import_root(client, bd, test_library_2["id"])

        response = await client.get("/api/v1/import/directories")

        assert response.status_code == 200
        assert [(row["path"], row["library_id"]) for row in response.json()] == [
            (str(bd), test_library_2["id"]),
            (str(manga), test_library["id"]),
        ]

    @pytest.mark.asyncio
    async def test_refresh_import_directory(
        self, client: AsyncClient, comics_root: Path, make_comic, test_library: Dict[str, Any]
    ):
        make_comic(comics_root, "Foo (Bar)")
        await import_root(client, comics_root, test_library["id"])
        make_comic(comics_root, "Baz (Qux)")
        directory_id = (await client.get("/api/v1/import/directories")).json()[0]["id"]

        response = await client.post(f"/api/v1/import/directories/{directory_id}/refresh")

        assert response.status_code == 200
        assert response.json() == {"imported": 1, "updated": 1}
        assert (await client.post("/api/v1/import/directories/999/refresh")).status_code == 404

    @pytest.mark.asyncio
    async def test_refresh_import_directory_without_library(
        self, client: AsyncClient, comics_root: Path, make_comic, test_library: Dict[str, Any]
    ):
        make_comic(comics_root, "Foo (Bar)")
        await import_root(client, comics_root, test_library["id"])
        directory_id = (await client.get("/api/v1/import/directories")).json()[0]["id"]
        await client.delete(f"/api/v1/library/{test_library['id']}")

        response = await client.post(f"/api/v1/import/directories/{directory_id}/refresh")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_clear_import_directory(
        self, client: AsyncClient, tmp_path: Path, make_comic, test_library: Dict[str, Any]
    ):
        """Only comics beneath the cleared root go, including a sibling root sharing its prefix."""
        manga, manga_extra = tmp_path / "manga", tmp_path / "manga-extra"
        make_comic(manga, "Foo (Bar)")
        make_comic(manga_extra, "Baz (Qux)")
        await import_root(client, manga, test_library["id"])
        await import_root(client, manga_extra, test_library["id"])
        directories = {row["path"]: row["id"] for row in (await client.get("/api/v1/import/directories")).json()}

        response = await client.delete(f"/api/v1/import/directories/{directories[str(manga)]}")

        assert response.status_code == 204
        comics = (await client.get("/api/v1/comic/")).json()["data"]
        assert [comic["name"] for comic in comics] == ["Baz"]
        assert [row["path"] for row in (await client.get("/api/v1/import/directories")).json()] == [str(manga_extra)]
        assert (await client.delete(f"/api/v1/import/directories/{directories[str(manga)]}")).status_code == 404

    @pytest.mark.asyncio
    async def test_clear_catalog(
        self, client: AsyncClient, comics_root: Path, make_comic, test_library: Dict[str, Any]
    ):
        make_comic(comics_root, "Foo (Bar)", volumes={"Vol. 1": ["Foo Ch. 1.cbz"]})
        await import_root(client, comics_root, test_library["id"])
        await client.put("/api/v1/settings/hidden-content", json={"enabled": True})

        response = await client.delete("/api/v1/import/")

        assert response.status_code == 204
        assert (await client.get("/api/v1/comic/")).json()["total_count"] == 0
        assert (await client.get("/api/v1/library/")).json()["total_count"] == 0
        assert (await client.get("/api/v1/import/directories")).json() == []
        assert (await client.get("/api/v1/settings/hidden-content")).json() == {"enabled": False}
