"""Filesystem scanning for comic directories.

The scanner reads directories and nothing else: it never touches the
catalog, so a whole import root can be scanned before a write transaction
is opened. Entries are processed in the order the operating system lists
them; the first matching cover or volume archive wins and nothing is
re-sorted. Entries whose names are not valid UTF-8 are skipped.

A comic directory looks like::

    Foo (Bar)/
        cover.jpg
        Vol. 1/
            Foo Vol. 1.cbz        <- volume archive
            Foo Vol. 1 Ch. 3.cbz  <- chapter 3
            Foo Extra 1.cbz       <- extra 1
"""

import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ...infrastructure.logging import get_logger
from ..chapter.models import ChapterKind
from ..common.exceptions import ScanError
from .parser import (
    ComicIdentity,
    is_archive,
    is_cover_image_candidate,
    is_preferred_cover,
    is_storable_name,
    is_volume_archive,
    parse_chapter_identity,
    parse_comic_identity,
    parse_volume_number,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChapterScan:
    """A chapter or extra archive found in a volume folder."""

    number: int
    kind: ChapterKind
    file: str


@dataclass
class VolumeScan:
    """A volume folder and the archives found in it."""

    number: int
    directory: str
    file: Optional[str] = None
    chapters: List[ChapterScan] = field(default_factory=list)


@dataclass
class ComicScan:
    """Everything the importer needs to know about one comic directory."""

    directory: str
    identity: ComicIdentity
    cover_image: Optional[str] = None
    volumes: List[VolumeScan] = field(default_factory=list)


def _list_entries(directory: str) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as entries:
            listed = list(entries)
    except OSError as e:
        raise ScanError(directory, e.strerror or str(e)) from e

    storable = []
    for entry in listed:
        if is_storable_name(entry.name):
            storable.append(entry)
        else:
            logger.debug(f"Skipping entry whose name is not valid UTF-8: {entry.path!r}")
    return storable


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError as e:
        raise ScanError(entry.path, e.strerror or str(e)) from e


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError as e:
        raise ScanError(entry.path, e.strerror or str(e)) from e


def list_comic_folders(root: str) -> List[Tuple[str, ComicIdentity]]:
    """List the immediate subdirectories of ``root`` that are named like comics.

    Args:
        root: Import root directory

    Returns:
        (directory path, parsed identity) pairs in listing order

    Raises:
        ScanError: If ``root`` cannot be listed
    """
    folders = []
    for entry in _list_entries(root):
        if not _is_dir(entry):
            continue

        identity = parse_comic_identity(entry.name)
        if identity is None:
            logger.debug(f"Skipping folder without a comic name: {entry.path}")
            continue

        folders.append((os.path.join(root, entry.name), identity))

    return folders


def select_cover_image(entries: Iterable[os.DirEntry]) -> Optional[str]:
    """Pick the cover: the first "icon"/"cover" image, else the first image."""
    fallback = None
    for entry in entries:
        if not _is_file(entry) or not is_cover_image_candidate(entry.name):
            continue
        if is_preferred_cover(entry.name):
            return entry.path
        if fallback is None:
            fallback = entry.path
    return fallback


def scan_volume_directory(number: int, directory: str, archive_extensions: Tuple[str, ...]) -> VolumeScan:
    """Scan one volume folder for its volume archive and its chapters."""
    archives = [entry for entry in _list_entries(directory) if _is_file(entry) and is_archive(entry.name, archive_extensions)]

    volume = VolumeScan(number=number, directory=directory)
    volume.file = next(
        (os.path.join(directory, entry.name) for entry in archives if is_volume_archive(entry.name, archive_extensions)),
        None,
    )

    for entry in archives:
        path = os.path.join(directory, entry.name)
        if path == volume.file:
            continue

        identity = parse_chapter_identity(entry.name)
        if identity is None:
            continue

        volume.chapters.append(ChapterScan(number=identity.number, kind=identity.kind, file=path))

    return volume


def scan_comic_directory(
    directory: str,
    identity: ComicIdentity,
    archive_extensions: Tuple[str, ...] = (".cbz",),
) -> ComicScan:
    """Scan a comic directory into a ``ComicScan``.

    Args:
        directory: The comic's directory
        identity: Name and author parsed from the directory name
        archive_extensions: Extensions of chapter and volume archives

    Returns:
        The comic's cover, volumes and chapters as found on disk

    Raises:
        ScanError: If the comic directory or one of its volume folders cannot be read
    """
    entries = _list_entries(directory)

    scan = ComicScan(directory=directory, identity=identity, cover_image=select_cover_image(entries))

    for entry in entries:
        if not _is_dir(entry):
            continue

        number = parse_volume_number(entry.name)
        if number is None:
            continue

        scan.volumes.append(scan_volume_directory(number, os.path.join(directory, entry.name), archive_extensions))

    return scan
