"""Pydantic schemas for volume entities."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..chapter.schemas import ChapterRead


class VolumeRead(BaseModel):
    """Schema for reading volume data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    comic_id: int
    number: int
    directory: str
    file: Optional[str] = Field(default=None, description="Archive holding the whole volume")


class VolumeDetail(VolumeRead):
    """A volume with its chapters and extras, chapters first, each by number."""

    chapters: List[ChapterRead] = Field(default_factory=list)
