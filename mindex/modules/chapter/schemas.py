"""Pydantic schemas for chapter entities."""

from pydantic import BaseModel, ConfigDict

from .models import ChapterKind


class ChapterRead(BaseModel):
    """Schema for reading chapter data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    volume_id: int
    number: int
    kind: ChapterKind
    file: str
