"""Name parsing for comic folders, volume folders and chapter archives.

Every function here is pure and total: a name that does not follow the
naming convention yields ``None``/``False`` instead of an exception, so the
scanner can skip unrecognized entries without special cases.

Conventions:

- comic folder: ``<name> (<author>)``
- volume folder: contains ``Vol.<digits>`` (``Vol. 3``, ``vol.12``)
- chapter archive: contains ``Ch.<digits>``
- extra archive: contains ``Extra<digits>``; wins over ``Ch.`` when both occur
- volume archive: archive extension, ``Vol.<digits>``, and neither ``Ch.`` nor ``Extra``
"""

import os
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from ..chapter.models import ChapterKind

COMIC_FOLDER_RE = re.compile(r"^(.+?)\s*\(([^)]+)\)\s*$")
VOLUME_RE = re.compile(r"Vol\.\s*(\d+)", re.IGNORECASE)
EXTRA_RE = re.compile(r"Extra\s*(\d+)", re.IGNORECASE)
CHAPTER_RE = re.compile(r"Ch\.\s*(\d+)", re.IGNORECASE)
CHAPTER_TOKEN_RE = re.compile(r"Ch\.", re.IGNORECASE)
EXTRA_TOKEN_RE = re.compile(r"Extra", re.IGNORECASE)

# Largest value an SQLite INTEGER column holds
MAX_NUMBER = 2**63 - 1

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"})
COVER_KEYWORDS = ("icon", "cover")


@dataclass(frozen=True)
class ComicIdentity:
    """Name and author read from a comic folder name."""

    name: str
    author: str


@dataclass(frozen=True)
class ChapterIdentity:
    """Number and kind read from a chapter or extra file name."""

    number: int
    kind: ChapterKind


def _number(match: re.Match) -> Optional[int]:
    digits = match.group(1).lstrip("0") or "0"
    if len(digits) > len(str(MAX_NUMBER)):
        return None
    number = int(digits)
    return number if number <= MAX_NUMBER else None


def is_storable_name(name: str) -> bool:
    """True when ``name`` encodes as UTF-8.

    On POSIX, ``os`` decodes bytes that are not valid UTF-8 into lone
    surrogates; such names cannot be written to the catalog.
    """
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_comic_identity(folder_name: str) -> Optional[ComicIdentity]:
    """Parse ``<name> (<author>)``.

    Both parts are trimmed; a folder whose name or author is blank after
    trimming is not a comic.

    >>> parse_comic_identity("One Piece  ( Oda Eiichiro )")
    ComicIdentity(name='One Piece', author='Oda Eiichiro')
    >>> parse_comic_identity("Scans") is None
    True
    """
    if not isinstance(folder_name, str):
        return None

    match = COMIC_FOLDER_RE.match(folder_name)
    if not match:
        return None

    name, author = match.group(1).strip(), match.group(2).strip()
    if not name or not author:
        return None
    return ComicIdentity(name=name, author=author)


def parse_volume_number(folder_name: str) -> Optional[int]:
    """Return the number of the first ``Vol.`` token, or None.

    A number too large for the catalog to store is a miss.
    """
    if not isinstance(folder_name, str):
        return None

    match = VOLUME_RE.search(folder_name)
    return _number(match) if match else None


def parse_chapter_identity(file_name: str) -> Optional[ChapterIdentity]:
    """Classify a file name as an extra, a chapter, or neither."""
    if not isinstance(file_name, str):
        return None

    match = EXTRA_RE.search(file_name)
    kind = ChapterKind.EXTRA
    if not match:
        match = CHAPTER_RE.search(file_name)
        kind = ChapterKind.CHAPTER
    if not match:
        return None

    number = _number(match)
    return ChapterIdentity(number=number, kind=kind) if number is not None else None


def is_cover_image_candidate(file_name: str) -> bool:
    """True for image files that can serve as a comic cover."""
    if not isinstance(file_name, str):
        return False
    return os.path.splitext(file_name)[1].lower() in IMAGE_EXTENSIONS


def is_preferred_cover(file_name: str) -> bool:
    """True for cover candidates whose name says they are a cover or icon."""
    lowered = file_name.lower()
    return any(keyword in lowered for keyword in COVER_KEYWORDS)


def is_archive(file_name: str, archive_extensions: Iterable[str]) -> bool:
    """True when the file name ends in one of ``archive_extensions`` (case-insensitive)."""
    if not isinstance(file_name, str):
        return False
    return file_name.lower().endswith(tuple(ext.lower() for ext in archive_extensions))


def is_volume_archive(file_name: str, archive_extensions: Iterable[str]) -> bool:
    """True for the archive that bundles a whole volume.

    It carries a ``Vol.<digits>`` token and no ``Ch.``/``Extra`` token, which
    tells it apart from per-chapter archives that also name their volume.
    """
    return (
        is_archive(file_name, archive_extensions)
        and VOLUME_RE.search(file_name) is not None
        and CHAPTER_TOKEN_RE.search(file_name) is None
        and EXTRA_TOKEN_RE.search(file_name) is None
    )
