"""Pydantic schemas for imports and tracked import roots."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema


class ImportRequest(BaseModel):
    """Schema for importing a root directory into a library."""

    path: str = Field(min_length=1, description="Directory containing comic folders")
    library_id: int = Field(description="Library the imported comics are filed under")


class ImportResult(BaseModel):
    """Counts of comics created and matched by one import pass."""

    imported: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        return self.imported + self.updated


class ImportStatus(BaseModel):
    """Whether an import or refresh pass is running."""

    in_progress: bool


class ImportDirectoryRead(TimestampSchema):
    """Schema for reading a tracked import root."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    path: str
    library_id: Optional[int] = None
