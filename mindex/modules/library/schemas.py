"""Pydantic schemas for library entities."""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema


class LibraryBase(BaseModel):
    """Base schema for library data."""

    name: Annotated[str, Field(min_length=1, max_length=255, description="Library name")]
    description: Optional[str] = Field(default=None, max_length=1000, description="Library description")
    media_type: str = Field(default="comics", max_length=50, description="Kind of media filed in the library")
    image_path: Optional[str] = Field(default=None, description="Cover image shown for the library")
    is_hidden: bool = Field(default=False, description="Hide the library and its comics from listings")


class LibraryCreate(LibraryBase):
    """Schema for creating a new library."""

    pass


class LibraryUpdate(BaseModel):
    """Schema for updating an existing library."""

    name: Optional[Annotated[str, Field(min_length=1, max_length=255)]] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    media_type: Optional[str] = Field(default=None, max_length=50)
    image_path: Optional[str] = None
    is_hidden: Optional[bool] = None


class LibraryRead(TimestampSchema, LibraryBase):
    """Schema for reading library data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    comic_count: int = Field(default=0, description="Number of comics filed in the library")
