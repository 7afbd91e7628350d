"""Pydantic schemas for comic entities."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema
from ..volume.schemas import VolumeDetail


class ComicRead(TimestampSchema):
    """Schema for reading comic data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    author: str
    directory: str
    image_path: Optional[str] = Field(default=None, description="Cover image picked during import")
    library_id: Optional[int] = Field(default=None, description="Library the comic is filed under, if any")
    favorite: bool = False


class ComicDetail(ComicRead):
    """A comic with its volumes ordered by number."""

    volumes: List[VolumeDetail] = Field(default_factory=list)


class FavoriteState(BaseModel):
    """Favorite flag of a comic after a toggle."""

    comic_id: int
    favorite: bool
